"""
HiggsFlow Client Matching - Configuration

Loads settings from environment variables with sensible defaults.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        default=f"sqlite:///{PROJECT_ROOT}/data/higgsflow.db"
    )

    @property
    def project_root(self) -> Path:
        """Return project root directory."""
        return PROJECT_ROOT

    # Application
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: str = Field(default="")

    @property
    def log_dir(self) -> Path:
        """Log directory; relative paths are under the project root."""
        if not self.LOG_DIR:
            return PROJECT_ROOT / "logs"
        path = Path(self.LOG_DIR).expanduser()
        return path if path.is_absolute() else PROJECT_ROOT / path

    # Client matching (0-100 scores)
    CLIENT_MATCH_THRESHOLD: int = Field(default=70)
    CLIENT_SUGGESTION_THRESHOLD: int = Field(default=40)
    CLIENT_SUGGESTION_LIMIT: int = Field(default=3)

    # Business terms used when neither the client nor the document has them
    DEFAULT_PAYMENT_TERMS: str = Field(default="Net 30")
    DEFAULT_DELIVERY_TERMS: str = Field(default="DDP")
    DEFAULT_CURRENCY: str = Field(default="MYR")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
