# projectdocs/config.py
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./projectdocs.db"  # Default if not in .env

    # Storage Paths
    STORAGE_PATH: Path = Path("storage")
    ATTACHMENTS_PATH: Path | None = None  # Will be set based on STORAGE_PATH
    MAX_ATTACHMENT_SIZE: int = 5 * 1024 * 1024

    # Mail
    APP_URL: str = "http://localhost:8000"
    MAIL_FROM: str = "projectdocs <noreply@localhost>"
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_STARTTLS: bool = True
    NOTIFICATIONS_DEFERRED: bool = True

    # Bootstrap admin, created when no users exist
    ADMIN_LOGIN: str = "admin"
    ADMIN_MAIL: str = "admin@example.net"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context) -> None:
        """Post initialization hook to set derived paths"""
        if isinstance(self.STORAGE_PATH, str):
            self.STORAGE_PATH = Path(self.STORAGE_PATH)

        self.ATTACHMENTS_PATH = Path(self.ATTACHMENTS_PATH) if self.ATTACHMENTS_PATH else self.STORAGE_PATH / "attachments"

        self.create_storage_dirs()

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST)

    def create_storage_dirs(self) -> None:
        """Create necessary storage directories if they don't exist"""
        for path in [self.STORAGE_PATH, self.ATTACHMENTS_PATH]:
            path.mkdir(parents=True, exist_ok=True)


settings = Settings()
