import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    RQ_QUEUE_NAME: str = os.getenv("RQ_QUEUE_NAME", "submissions")

    # Remote transaction service (owns transactions, settings and the registries)
    REMOTE_BASE_URL: str = os.getenv("REMOTE_BASE_URL", "").rstrip("/")
    # Transport timeout only; the wizard itself never times out a submission.
    REMOTE_TIMEOUT_SEC: float = float(os.getenv("REMOTE_TIMEOUT_SEC", "30.0"))
    TRANSACTION_SOURCE: str = os.getenv("TRANSACTION_SOURCE", "web")

    # Submission delivery modes:
    # - "sync": remote create call runs inside the confirm request
    # - "rq": confirm enqueues the call and the client polls the wizard state
    SUBMIT_MODE: str = os.getenv("SUBMIT_MODE", "sync").lower()

    # Wizard sessions
    WIZARD_TTL_SEC: int = int(os.getenv("WIZARD_TTL_SEC", "3600"))
    SESSION_LOCK_TTL_MS: int = int(os.getenv("SESSION_LOCK_TTL_MS", "5000"))
    DASHBOARD_PATH: str = os.getenv("DASHBOARD_PATH", "/dashboard")

    # Dialer-based carriers deduct their fee before crediting the merchant.
    USSD_FEE_FACTOR: str = os.getenv("USSD_FEE_FACTOR", "0.99")

    # Observability
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    # Admin endpoints
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "true").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

settings = Settings()
