"""Gate Pass: event tickets, subscription plans and the admin back office."""
