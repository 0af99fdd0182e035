from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./havenhouse.db"
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 24 * 60
    staff_cookie_name: str = "staff-auth-token"
    resident_cookie_name: str = "resident-auth-token"
    secure_cookies: bool = False
    # Facility / dashboard settings
    facility_capacity: int = 35
    occupancy_target: int = 85
    conversion_target: int = 70
    on_time_target: int = 90
    monthly_revenue_target: int = 15000
    default_monthly_rent: int = 500
    notification_feed_limit: int = 50
    # Optional first staff account, created on startup when both are set
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"


settings = Settings()
