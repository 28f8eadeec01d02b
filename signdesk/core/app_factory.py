from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import stripe
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..domain.errors import DomainError
from ..infrastructure.repositories.package_repository import PackageRepository
from ..infrastructure.repositories.review_repository import ReviewRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..presentation.api.routers import billing_webhook_router
from ..presentation.api.routers import package_router
from ..presentation.api.routers import payment_method_router
from ..presentation.api.routers import review_router
from ..presentation.api.routers import user_router
from ..presentation.api.routers import user_subscription_router
from ..services.email_service import EmailService
from ..services.package_service import PackageService
from ..services.payment_method_service import PaymentMethodService
from ..services.review_service import ReviewService
from ..services.stripe_service import StripeService
from ..services.subscription_service import SubscriptionService
from ..services.user_service import UserService

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="SignDesk API", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(user_router.router)
    app.include_router(user_subscription_router.router)
    app.include_router(payment_method_router.router)
    app.include_router(package_router.router)
    app.include_router(review_router.router)
    app.include_router(billing_webhook_router.router)

    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(stripe.StripeError, _stripe_error_handler)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: ApplicationContainer = app.state.container  # type: ignore[attr-defined]
        return {"ok": True, "stripe": container.stripe_service.is_connected()}

    return app


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _stripe_error_handler(request: Request, exc: stripe.StripeError) -> JSONResponse:
    status_code = exc.http_status or 502
    logger.error("Stripe request failed on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.user_message or "Payment provider request failed."},
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        settings.database_path.parent.mkdir(parents=True, exist_ok=True)
        db_path = str(settings.database_path)

        user_repository = UserRepository(db_path)
        package_repository = PackageRepository(db_path)
        review_repository = ReviewRepository(db_path)

        stripe_service = StripeService(settings.stripe_secret_key)
        email_service = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            base_url=settings.frontend_base_url,
        )

        container = ApplicationContainer(
            settings=settings,
            stripe_service=stripe_service,
            email_service=email_service,
            user_service=UserService(
                user_repository,
                jwt_secret=settings.jwt_secret,
                jwt_expiration_hours=settings.jwt_expiration_hours,
            ),
            subscription_service=SubscriptionService(
                user_repository,
                webhook_secret=settings.stripe_webhook_secret,
            ),
            payment_method_service=PaymentMethodService(stripe_service, user_repository),
            package_service=PackageService(package_repository),
            review_service=ReviewService(
                review_repository,
                package_repository,
                user_repository,
                email_service,
            ),
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("SignDesk API started with database %s", db_path)

        yield

    return lifespan
