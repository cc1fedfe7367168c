"""Configuration helpers for the feeds CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SERVICE_URL = "https://mws.amazonservices.com"


def _default_db_url() -> str:
    return "sqlite:////opt/mws-feeds/data/feeds.db"


@dataclass(frozen=True)
class ThrottleConfig:
    """Advisory request quota for one operation group."""

    limit: int = 15
    interval: float = 60.0
    group: str = "GetFeedSubmissionResult"


@dataclass(frozen=True)
class Settings:
    mws_merchant_id: str
    mws_access_key_id: str
    mws_secret_key: str
    mws_auth_token: str
    mws_service_url: str
    mws_mock_dir: Path
    feeds_db_url: str
    feeds_output_dir: Path
    feeds_log_level: str
    feed_result_throttle: ThrottleConfig


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> Settings:
    load_dotenv()

    defaults = ThrottleConfig()
    throttle = ThrottleConfig(
        limit=_int_env("THROTTLE_LIMIT_FEEDRESULT", defaults.limit),
        interval=_float_env("THROTTLE_TIME_FEEDRESULT", defaults.interval),
    )

    return Settings(
        mws_merchant_id=os.getenv("MWS_MERCHANT_ID", ""),
        mws_access_key_id=os.getenv("MWS_ACCESS_KEY_ID", ""),
        mws_secret_key=os.getenv("MWS_SECRET_KEY", ""),
        mws_auth_token=os.getenv("MWS_AUTH_TOKEN", ""),
        mws_service_url=os.getenv("MWS_SERVICE_URL", DEFAULT_SERVICE_URL),
        mws_mock_dir=Path(os.getenv("MWS_MOCK_DIR", "mock")),
        feeds_db_url=os.getenv("FEEDS_DB_URL", _default_db_url()),
        feeds_output_dir=Path(os.getenv("FEEDS_OUTPUT_DIR", "/opt/mws-feeds/output")),
        feeds_log_level=os.getenv("FEEDS_LOG_LEVEL", "INFO"),
        feed_result_throttle=throttle,
    )


def ensure_required_mws_credentials(settings: Settings) -> None:
    missing = []
    if not settings.mws_merchant_id:
        missing.append("MWS_MERCHANT_ID")
    if not settings.mws_access_key_id:
        missing.append("MWS_ACCESS_KEY_ID")
    if not settings.mws_secret_key:
        missing.append("MWS_SECRET_KEY")
    if not settings.mws_service_url:
        missing.append("MWS_SERVICE_URL")

    if missing:
        msg = ", ".join(missing)
        raise RuntimeError(f"Missing required MWS configuration: {msg}")


def ensure_runtime_directories(settings: Settings) -> None:
    settings.feeds_output_dir.mkdir(parents=True, exist_ok=True)

    if settings.feeds_db_url.startswith("sqlite:///"):
        db_file = Path(settings.feeds_db_url.replace("sqlite:///", "", 1))
        if db_file.is_absolute() and db_file.parent != Path("/"):
            db_file.parent.mkdir(parents=True, exist_ok=True)
