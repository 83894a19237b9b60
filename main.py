"""
main.py

Application entrypoint for the SkillConnect API.
- Initializes structured logging
- Sets up FastAPI application and middlewares
- Registers all API routers
- Integrates rate limiting via SlowAPI
- Adds common security headers
- Configures CORS
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from skillconnect.booking.routes import router as booking_router
from skillconnect.core.config import settings
from skillconnect.core.limiter import limiter
from skillconnect.core.logging import init_logging
from skillconnect.discovery.routes import router as discovery_router
from skillconnect.messaging.routes import router as messaging_router
from skillconnect.notification.routes import router as notification_router
from skillconnect.payment.routes import router as payment_router
from skillconnect.profile.routes import router as profile_router
from skillconnect.service.routes import router as service_router

# -----------------------------
# FastAPI App Initialization
# -----------------------------
init_logging()
app = FastAPI(title=f"{settings.APP_NAME} API", debug=settings.DEBUG)

# -----------------------------
# Middleware Configuration
# -----------------------------
app.state.limiter = limiter


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    return _rate_limit_exceeded_handler(request, exc)  # type: ignore[arg-type]


app.add_exception_handler(429, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# -----------------------------
# Security Headers Middleware
# -----------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add common security headers to responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# -----------------------------
# CORSMiddleware Configuration
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# API Router Registration
# -----------------------------
app.include_router(profile_router)
app.include_router(service_router)
app.include_router(discovery_router)
app.include_router(booking_router)
app.include_router(payment_router)
app.include_router(notification_router)
app.include_router(messaging_router)


# -----------------------------
# Root / Health Endpoints
# -----------------------------
@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def home() -> Any:
    return f"""
    <html>
        <head>
            <title>Welcome to {settings.APP_NAME}</title>
        </head>
        <body style="font-family: Arial, sans-serif; text-align: center; padding-top: 50px;">
            <h1>Welcome to <span style="color: #2c3e50;">{settings.APP_NAME}</span></h1>
            <p>API backend for booking local services and posting jobs.</p>
        </body>
    </html>
    """


@app.get("/health", tags=["Health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
