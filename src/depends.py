from datetime import timedelta
from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.employee_records import HttpEmployeeRecords
from src.adapter.services.identity_provisioner import HttpIdentityProvisioner
from src.adapter.services.notification_dispatcher import HttpNotificationDispatcher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.employee_records import IEmployeeRecords
from src.app.services.identity_provisioner import IIdentityProvisioner
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.use_cases.onboarding import OnboardingSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_onboarding_settings() -> OnboardingSettings:
    return OnboardingSettings(
        invitation_ttl=timedelta(days=ApplicationConfig.INVITATION_TTL_DAYS),
        resend_extends_expiry=ApplicationConfig.INVITATION_RESEND_EXTENDS_EXPIRY,
        frontend_base_url=ApplicationConfig.FRONTEND_BASE_URL,
        signup_path=ApplicationConfig.SIGNUP_PATH,
        allowed_frontend_origins=tuple(
            origin.rstrip("/") for origin in ApplicationConfig.CORS_ORIGINS
        ),
        default_salary_currency=ApplicationConfig.DEFAULT_SALARY_CURRENCY,
        upstream_timeout=ApplicationConfig.UPSTREAM_TIMEOUT_SECONDS,
    )


def get_identity_provisioner() -> IIdentityProvisioner:
    return HttpIdentityProvisioner(
        ApplicationConfig.IDENTITY_SERVICE_URL,
        ApplicationConfig.SERVICE_API_KEY,
        timeout=ApplicationConfig.UPSTREAM_TIMEOUT_SECONDS,
    )


def get_employee_records() -> IEmployeeRecords:
    return HttpEmployeeRecords(
        ApplicationConfig.EMPLOYEE_SERVICE_URL,
        ApplicationConfig.SERVICE_API_KEY,
        timeout=ApplicationConfig.UPSTREAM_TIMEOUT_SECONDS,
    )


def get_notification_dispatcher() -> INotificationDispatcher:
    return HttpNotificationDispatcher(
        ApplicationConfig.NOTIFICATION_SERVICE_URL,
        ApplicationConfig.SERVICE_API_KEY,
        timeout=ApplicationConfig.UPSTREAM_TIMEOUT_SECONDS,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id and role

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Missing bearer token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    payload = verify_jwt(credentials.credentials)

    if payload is None or not payload.get("user_id"):
        raise ClientError(
            Error("UNAUTHORIZED", "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return payload
