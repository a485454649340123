import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogs import router as blogs_router
from contacts import router as contacts_router
from core import db, schema
from core.errors import AppError, StoreError
from core.responses import error_response, ok
from core.settings import Settings, load_settings
from uploads import router as uploads_router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = str(first.get("msg") or "invalid value")
    return f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "store_error method=%s path=%s detail=%s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        return error_response(exc.status_code, exc.public_message)

    @app.exception_handler(AppError)
    async def handle_app_error(_: Request, exc: AppError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            "unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return error_response(500, "Something went wrong!")


def _endpoint_directory(settings: Settings) -> dict:
    endpoints: dict = {
        "contact": {
            "POST /api/contact": "Submit contact form",
            "GET /api/contacts": "Get all contacts (admin)",
        },
        "GET /api/health": "Health check",
    }
    if settings.enable_blog:
        endpoints["blog"] = {
            "GET /api/blogs": "Get all published blogs",
            "GET /api/blogs/:slug": "Get single blog by slug",
            "GET /api/admin/blogs": "Get all blogs including drafts (admin)",
            "POST /api/admin/blogs": "Create new blog (admin)",
            "PUT /api/admin/blogs/:id": "Update blog (admin)",
            "DELETE /api/admin/blogs/:id": "Delete blog (admin)",
            "POST /api/upload-blog-image": "Upload blog image (admin)",
        }
    return endpoints


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pool per process; schema is brought up to date before serving.
        database = db.Database.from_settings(settings)
        app.state.database = database
        try:
            await database.connect()
        except StoreError:
            logger.exception("database_connect_failed strict=%s", settings.schema_strict)
            if settings.schema_strict:
                raise
        if database.connected:
            await schema.ensure_schema(
                database,
                include_blogs=settings.enable_blog,
                strict=settings.schema_strict,
            )
        else:
            logger.warning("schema_provisioning_skipped reason=store unreachable")
        if not settings.admin_token:
            logger.warning("admin_routes_unauthenticated reason=ADMIN_TOKEN not set")
        try:
            yield
        finally:
            app.state.database = None
            await database.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["Content-Length"],
    )

    _register_error_handlers(app)

    app.include_router(contacts_router.router, tags=["contacts"])
    if settings.enable_blog:
        app.include_router(blogs_router.router, tags=["blogs"])
        app.include_router(uploads_router.router, tags=["uploads"])

    @app.get("/api/health")
    def health() -> dict:
        body = ok(message="Server is running")
        body["timestamp"] = datetime.now(timezone.utc)
        return body

    @app.get("/")
    def root() -> dict:
        body = ok(message="API Server is running")
        body["endpoints"] = _endpoint_directory(settings)
        return body

    return app


_settings = load_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = create_app(_settings)
