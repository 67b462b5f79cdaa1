"""Application wiring for the console session service.

Configuration, the database tables, middleware, routers and error handlers
are brought together here. Importing ``app`` gives a ready FastAPI instance;
``app.main`` adds logging and metrics on top for the deployed process.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    ServiceError,
    http_exception_handler,
    service_error_handler,
    validation_exception_handler,
)
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware

# Importing the models registers them with the metadata so create_all knows
# about every table.
from .models import inventory as _inventory  # noqa: F401
from .models import session as _session  # noqa: F401

app = FastAPI(title=settings.APP_NAME)

Base.metadata.create_all(bind=engine)

app.add_middleware(RequestIdMiddleware)

from .routers import api_sessions as api_sessions_router  # noqa: E402

app.include_router(api_sessions_router.router)

from .routers import api_reports as api_reports_router  # noqa: E402

app.include_router(api_reports_router.router)

from .routers import api_inventory as api_inventory_router  # noqa: E402

app.include_router(api_inventory_router.router)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


__all__ = ["app"]
