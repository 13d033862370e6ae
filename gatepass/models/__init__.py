"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from .access import Access
from .charge import PendingCharge, Purchase
from .subscription import Subscription
from .ticket import Ticket
from .user import User

__all__ = ["Access", "PendingCharge", "Purchase", "Subscription", "Ticket", "User"]
