from dotenv import load_dotenv
load_dotenv()
import os
from dataclasses import dataclass, field
from typing import List


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    """
    Runtime configuration for the catalog listing service.

    Values can be overridden via environment variables (or a local `.env`).
    """

    # Backend catalog API
    CATALOG_API_URL: str = os.getenv("CATALOG_API_URL", "http://localhost:3001/api")
    CATALOG_API_TIMEOUT_SECONDS: float = float(
        os.getenv("CATALOG_API_TIMEOUT_SECONDS", "8.0")
    )

    # Upper bound for one relaxation attempt (request + body parsing).
    ATTEMPT_TIMEOUT_SECONDS: float = float(os.getenv("ATTEMPT_TIMEOUT_SECONDS", "5.0"))

    # Listing page sizes per catalog surface
    PRODUCTS_PAGE_SIZE: int = int(os.getenv("PRODUCTS_PAGE_SIZE", "8"))
    COURSES_PAGE_SIZE: int = int(os.getenv("COURSES_PAGE_SIZE", "6"))

    REDIRECT_STATUS_CODE: int = int(os.getenv("REDIRECT_STATUS_CODE", "308"))

    CORS_ORIGINS: List[str] = field(
        default_factory=lambda: _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000")
        )
    )


settings = Settings()
