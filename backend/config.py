"""
Concrete Station Approval - System Configuration
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Fee rates and approval validity moved into settings
v1.0.0 (2026-09-28): Initial configuration module
"""

from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional
import os


class Settings(BaseSettings):
    """System-wide configuration"""

    # Application
    APP_NAME: str = "Concrete Station Approval"
    APP_VERSION: str = "1.1.0"
    DEBUG: bool = False

    # API Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_WORKERS: int = 1  # Single writer on the SQLite file

    # SQLite Configuration
    SQLITE_DB_PATH: str = str(Path(__file__).parent / "data" / "stations.db")
    DB_BUSY_TIMEOUT: float = 5.0  # seconds to wait for the write lock

    # File Paths
    DATA_DIR: str = str(Path(__file__).parent / "data")
    DOCUMENTS_DIR: str = str(Path(__file__).parent / "data" / "documents")
    LOGS_DIR: str = str(Path(__file__).parent / "logs")

    # PDF documents (TTF with Arabic glyphs; Helvetica when unset)
    DOCUMENT_FONT_PATH: Optional[str] = None

    # Station Numbering
    STATION_CODE_PREFIX: str = "BMI/RM"  # BMI/RM/2026/17

    # Approval validity (one year minus one day)
    APPROVAL_VALIDITY_DAYS: int = 364

    # Fee Calculation (EGP)
    FEE_DISTANCE_RATE: float = 15.0  # per km
    FEE_MIXER_RATE: float = 1000.0  # per mixer
    FEE_ACCOMMODATION_COST: float = 1000.0
    FEE_ACCOMMODATION_MIN_DISTANCE_KM: float = 200.0
    FEE_ADDITIONAL_REPORT_RATE: float = 0.05  # bilingual report surcharge
    FEE_TAX_RATE: float = 0.14

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Singleton instance
settings = Settings()


def station_code(year: int, serial: int) -> str:
    """Build a station code: BMI/RM/<year>/<serial>"""
    if serial < 1:
        raise ValueError(f"Invalid station serial: {serial}")
    return f"{settings.STATION_CODE_PREFIX}/{year}/{serial}"


# Create required directories
def init_directories():
    """Create necessary directories if they don't exist"""
    for directory in [settings.DATA_DIR, settings.DOCUMENTS_DIR, settings.LOGS_DIR]:
        os.makedirs(directory, exist_ok=True)


if __name__ == "__main__":
    print(f"{settings.APP_NAME} Configuration v{settings.APP_VERSION}")
    print(f"SQLite: {settings.SQLITE_DB_PATH}")
    print(f"Documents: {settings.DOCUMENTS_DIR}")
    print(f"Station code example: {station_code(2026, 1)}")
    print(f"Approval validity: {settings.APPROVAL_VALIDITY_DAYS} days")
