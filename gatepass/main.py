from prometheus_fastapi_instrumentator import Instrumentator

from .app import app
from .core.config import settings
from .core.logging import setup_logging

setup_logging()
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    import uvicorn

    uvicorn.run("gatepass.main:app", host=settings.HOST, port=settings.PORT)
