"""Environment-variable-driven configuration for the insolvency document service.

Extraction tuning lives in ``extraction.config.ExtractionConfig``; this module
holds the settings of the HTTP surface and its collaborators.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# -- Uploads ------------------------------------------------------------------
INSOLVENCY_MAX_UPLOAD_BYTES: int = int(os.getenv("INSOLVENCY_MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))

# -- Rate limits --------------------------------------------------------------
INSOLVENCY_DEFAULT_RATE_LIMIT: str = os.getenv("INSOLVENCY_DEFAULT_RATE_LIMIT", "60/minute")
INSOLVENCY_EXTRACT_RATE_LIMIT: str = os.getenv("INSOLVENCY_EXTRACT_RATE_LIMIT", "10/minute")
INSOLVENCY_ANALYZE_RATE_LIMIT: str = os.getenv("INSOLVENCY_ANALYZE_RATE_LIMIT", "30/minute")

# -- Analysis trigger ---------------------------------------------------------
INSOLVENCY_ANALYSIS_URL: str = os.getenv("INSOLVENCY_ANALYSIS_URL", "http://localhost:54321/functions/v1").rstrip("/")
INSOLVENCY_ANALYSIS_TOKEN: str | None = os.getenv("INSOLVENCY_ANALYSIS_TOKEN")
INSOLVENCY_ANALYSIS_TIMEOUT_S: float = float(os.getenv("INSOLVENCY_ANALYSIS_TIMEOUT_S", "60"))
INSOLVENCY_ANALYSIS_MAX_RETRIES: int = int(os.getenv("INSOLVENCY_ANALYSIS_MAX_RETRIES", "2"))

# -- CORS ---------------------------------------------------------------------
INSOLVENCY_CORS_ALLOW_ORIGINS: list[str] = _env_csv(
    "INSOLVENCY_CORS_ALLOW_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
)
INSOLVENCY_CORS_ALLOW_METHODS: list[str] = _env_csv(
    "INSOLVENCY_CORS_ALLOW_METHODS",
    "GET,POST,OPTIONS",
)
INSOLVENCY_CORS_ALLOW_HEADERS: list[str] = _env_csv(
    "INSOLVENCY_CORS_ALLOW_HEADERS",
    "Authorization,Content-Type",
)
INSOLVENCY_CORS_ALLOW_CREDENTIALS: bool = _env_bool("INSOLVENCY_CORS_ALLOW_CREDENTIALS", False)

# -- Server -------------------------------------------------------------------
IS_CLOUD_RUN: bool = bool(os.getenv("K_SERVICE"))
