import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./onboarding.db")
    API_PREFIX = data.get("API_PREFIX", "/api/v1")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")

    # Onboarding invitations
    INVITATION_TTL_DAYS = int(data.get("INVITATION_TTL_DAYS", 7))
    INVITATION_RESEND_EXTENDS_EXPIRY = bool(
        data.get("INVITATION_RESEND_EXTENDS_EXPIRY", False)
    )
    FRONTEND_BASE_URL = data.get("FRONTEND_BASE_URL", "http://localhost:3000")
    SIGNUP_PATH = data.get("SIGNUP_PATH", "/employee-signup")
    DEFAULT_SALARY_CURRENCY = data.get("DEFAULT_SALARY_CURRENCY", "USD")

    # Collaborating services
    IDENTITY_SERVICE_URL = data.get("IDENTITY_SERVICE_URL", "http://localhost:8001")
    EMPLOYEE_SERVICE_URL = data.get("EMPLOYEE_SERVICE_URL", "http://localhost:8002")
    NOTIFICATION_SERVICE_URL = data.get(
        "NOTIFICATION_SERVICE_URL", "http://localhost:8003"
    )
    SERVICE_API_KEY = data.get("SERVICE_API_KEY", "dev-service-key")
    UPSTREAM_TIMEOUT_SECONDS = float(data.get("UPSTREAM_TIMEOUT_SECONDS", 10))
