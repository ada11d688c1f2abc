"""Application configuration"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Email Service
    resend_api_key: str = ""
    booking_from_address: str = "Vision Wan Services <bookings@visionwanservices.com>"
    contact_from_address: str = "Vision Wan Services <support@visionwanservices.com>"
    system_from_address: str = "Vision Wan Services <system@visionwanservices.com>"
    admin_email: str = "vision1servicesltd@gmail.com"
    email_max_attempts: int = 3
    email_retry_base_delay: float = 1.0

    # Department mailboxes
    department_general_email: str = "vision1servicesltd@gmail.com"
    department_booking_email: str = "vision1servicesltd@gmail.com"
    department_corporate_email: str = "vision1servicesltd@gmail.com"
    department_support_email: str = "vision1servicesltd@gmail.com"

    # Branding shown in emails and confirmation PDFs
    company_name: str = "Vision Wan Services"
    company_phone: str = "+254 (705) 336 311"
    company_phone_uk: str = "+44 (7397) 549 590"
    company_contact_email: str = "vision1servicesltd@gmail.com"

    # Uploads
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    archive_cleanup_delay_seconds: float = 5.0

    # Application Settings
    environment: str = "development"
    service_name: str = "Vision One Car Hire API"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Monitoring
    log_level: str = "INFO"

    # Keep-alive pinger
    backend_url: str = "http://localhost:5000"
    keepalive_interval_seconds: float = 14 * 60

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment.lower() == "development"


# Global settings instance
settings = Settings()
