import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from mall_admin.config.settings import settings
from mall_admin.core.errors import ActionError, ErrorCode, ERROR_MESSAGES, first_validation_message
from mall_admin.core.limiter import limiter
from mall_admin.core.results import ActionResult, respond
from mall_admin.modules.activity import routes as activity_routes
from mall_admin.modules.auth import routes as auth_routes
from mall_admin.modules.contacts import routes as contacts_routes
from mall_admin.modules.events import routes as events_routes
from mall_admin.modules.homepage import routes as homepage_routes
from mall_admin.modules.media import routes as media_routes
from mall_admin.modules.posts import routes as posts_routes
from mall_admin.modules.promotions import routes as promotions_routes
from mall_admin.modules.roles import routes as roles_routes
from mall_admin.modules.settings import routes as settings_routes
from mall_admin.modules.tenants import routes as tenants_routes
from mall_admin.modules.users import routes as users_routes
from mall_admin.modules.vip import routes as vip_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError):
    return respond(ActionResult.from_error(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Only the first violated rule is reported, like every other validation failure."""
    return respond(ActionResult.fail(first_validation_message(exc), ErrorCode.VALIDATION_FAILED))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    message = ERROR_MESSAGES[ErrorCode.STORAGE_UNAVAILABLE] if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"success": False, "error": message})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(users_routes.router, prefix="/api/v1")
app.include_router(roles_routes.router, prefix="/api/v1")
app.include_router(tenants_routes.router, prefix="/api/v1")
app.include_router(posts_routes.router, prefix="/api/v1")
app.include_router(events_routes.router, prefix="/api/v1")
app.include_router(promotions_routes.router, prefix="/api/v1")
app.include_router(vip_routes.router, prefix="/api/v1")
app.include_router(homepage_routes.router, prefix="/api/v1")
app.include_router(settings_routes.router, prefix="/api/v1")
app.include_router(contacts_routes.router, prefix="/api/v1")
app.include_router(activity_routes.router, prefix="/api/v1")
app.include_router(media_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment})")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; mutations will run with the restricted key")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to mall-admin", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: configuration needed to reach Supabase is present."""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return {"status": "ready"}
