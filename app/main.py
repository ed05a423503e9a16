from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.core.config import settings
from app.core.container import Services
from app.core.logging_config import configure_logging
from app.core.roles import ROLE_COORDINATOR, ROLE_HR, ROLE_MANAGER
from app.db.base import Base
from app.db.session import SessionLocal, engine as default_engine

# registers every table on Base.metadata
from app.models import activity, attachment, claim, user  # noqa: F401

from app.api.auth import router as auth_router
from app.api.claims import router as claims_router
from app.api.coordinator import router as coordinator_router
from app.api.manager import router as manager_router
from app.api.hr import router as hr_router


def seed_staff(services: Services) -> None:
    if not settings.SEED_PASSWORD:
        return
    services.users.seed_staff(
        settings.SEED_PASSWORD,
        [
            ("Programme Coordinator", settings.SEED_COORDINATOR_EMAIL, ROLE_COORDINATOR),
            ("Academic Manager", settings.SEED_MANAGER_EMAIL, ROLE_MANAGER),
            ("Human Resources", settings.SEED_HR_EMAIL, ROLE_HR),
        ],
    )


def create_app(services: Services = None, engine=None) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    bind = engine if engine is not None else default_engine
    Base.metadata.create_all(bind=bind)

    if services is None:
        services = Services(SessionLocal)
        seed_staff(services)

    app = FastAPI(title=settings.APP_NAME)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ROUTERS
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(claims_router, prefix="/api/claims", tags=["claims"])
    app.include_router(coordinator_router)
    app.include_router(manager_router)
    app.include_router(hr_router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
