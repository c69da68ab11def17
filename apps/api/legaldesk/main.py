import logging

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from starlette.exceptions import HTTPException as StarletteHTTPException

from legaldesk.api.errors import http_exception_handler, service_error_handler
from legaldesk.api.routes import router as api_router
from legaldesk.core.config import get_settings
from legaldesk.core.errors import ServiceError
from legaldesk.logging import configure_logging
from legaldesk.middleware.correlation_id import CorrelationIdMiddleware
from legaldesk.middleware.rate_limit import MutationRateLimitMiddleware
from legaldesk.middleware.request_logging import RequestLoggingMiddleware
from legaldesk.otel import get_fastapi_server_request_hook, setup_otel


configure_logging()
logger = logging.getLogger("legaldesk.lifecycle")

settings = get_settings()

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(MutationRateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.include_router(api_router)

if settings.otel_enabled:
    setup_otel(True)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())

logger.info("app.configured", extra={"environment": settings.app_env})
