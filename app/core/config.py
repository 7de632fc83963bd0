from atams import AtamsBaseSettings


class Settings(AtamsBaseSettings):
    """
    Application Settings

    Inherits from AtamsBaseSettings which includes:
    - DATABASE_URL (required)
    - ATLAS_SSO_URL, ATLAS_APP_CODE, ATLAS_ENCRYPTION_KEY, ATLAS_ENCRYPTION_IV
    - ENCRYPTION_ENABLED, ENCRYPTION_KEY, ENCRYPTION_IV (response encryption)
    - LOGGING_ENABLED, LOG_LEVEL, LOG_TO_FILE, LOG_FILE_PATH
    - CORS_ORIGINS, CORS_ALLOW_CREDENTIALS, CORS_ALLOW_METHODS, CORS_ALLOW_HEADERS
    - RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW
    - DEBUG

    All settings can be overridden via .env file or by redefining them here.
    """
    APP_NAME: str = "Event Attendance Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Scanner bridge authentication
    SCANNER_API_KEY: str

    # Local calendar used to decide what "today" means for the absence sweep
    TIMEZONE: str = "Asia/Kuala_Lumpur"

    # Attendance rules
    CHECKIN_GRACE_MINUTES: int = 5

    # Periodic jobs
    SCHEDULER_ENABLED: bool = False
    ACTIVE_SESSION_REFRESH_MINUTES: int = 5
    ABSENCE_SWEEP_CRON: str = "30 23 * * *"
    SCAN_LEDGER_RETENTION_DAYS: int = 7

    # Email notifications on check-in / check-out
    NOTIFICATIONS_ENABLED: bool = False
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_SENDER: str = "attendance@localhost"
    SMTP_USE_TLS: bool = True


settings = Settings()
