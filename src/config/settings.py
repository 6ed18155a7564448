# src/config/settings.py

"""Central configuration for the catalog_feed service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class ConfigError(Exception):
    """Raised when the service cannot start with the current configuration."""


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, falling back to *default* when unparsable."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_optional_int(name: str) -> int | None:
    """Read an optional positive integer env var (unset or invalid → None)."""
    value = _env_int(name, 0)
    return value if value > 0 else None


class Settings:
    """Central configuration for the catalog_feed service."""

    # --- Upstream catalog API ---
    API_URL: str = os.getenv("PENTA_API_URL", "")
    API_TOKEN: str = os.getenv("PENTA_API_TOKEN", "")
    REQUEST_TIMEOUT: int = 30           # Seconds before a request times out
    PAGE_DELAY: float = 0.5             # Seconds between page requests
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"

    # --- Catalog query ---
    PRODUCT_TYPE: int = _env_int("PRODUCT_TYPE", 1)
    FIELDS_KEY: str = os.getenv("FIELDS_KEY", "")
    STOCK: bool = os.getenv("STOCK", "").strip().lower() == "true"
    CATEGORY: str = os.getenv("CATEGORY", "")
    BRAND: str = os.getenv("BRAND", "")
    PRODUCT_ID: str = os.getenv("PRODUCT_ID", "")
    UPDATE_DATE: str = os.getenv("UPDATE_DATE", "")
    PAGE: int | None = _env_optional_int("PAGE")
    PAGE_SIZE: int | None = _env_optional_int("PAGE_SIZE")

    # --- Output ---
    XML_SCHEMA: str = os.getenv("XML_SCHEMA", "stok").strip().lower()
    STOCK_POLICY: str = os.getenv("STOCK_POLICY", "").strip().lower()
    EXTERNAL_WAREHOUSE_CODE: str = os.getenv(
        "EXTERNAL_WAREHOUSE_CODE", "EXT"
    )
    STOCK_CAP: int = _env_int("STOCK_CAP", 200)

    # --- Service ---
    UPDATE_INTERVAL_MINUTES: int = _env_int("UPDATE_INTERVAL_MINUTES", 30)
    SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT: int = _env_int("SERVER_PORT", 3000)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    @classmethod
    def validate(cls) -> list[str]:
        """Return a list of configuration problems (empty when startable)."""
        from src.render.xml_renderer import SCHEMAS
        from src.transform.stock import StockPolicy

        problems: list[str] = []
        if not cls.API_URL:
            problems.append("PENTA_API_URL is not set")
        if cls.XML_SCHEMA not in SCHEMAS:
            problems.append(
                f"Unknown XML_SCHEMA '{cls.XML_SCHEMA}' "
                f"(expected one of: {', '.join(sorted(SCHEMAS))})"
            )
        valid_policies = {p.value for p in StockPolicy}
        if cls.STOCK_POLICY and cls.STOCK_POLICY not in valid_policies:
            problems.append(
                f"Unknown STOCK_POLICY '{cls.STOCK_POLICY}' "
                f"(expected one of: {', '.join(sorted(valid_policies))})"
            )
        if cls.UPDATE_INTERVAL_MINUTES <= 0:
            problems.append("UPDATE_INTERVAL_MINUTES must be positive")
        return problems
