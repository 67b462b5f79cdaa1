from prometheus_fastapi_instrumentator import Instrumentator

from app.core.config import settings
from app.core.logging import configure_logging
from . import app as base_app

configure_logging(settings.LOG_LEVEL)
app = base_app
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
