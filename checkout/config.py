from __future__ import annotations
from dataclasses import dataclass
from dotenv import load_dotenv
import os

from checkout.promos.strategies import StrategyType, parse_strategy

load_dotenv()


def _str_to_bool(v: str | None, default: bool = False) -> bool:
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


# === Режим приложения ===
# Только для логов и /api/health; источник цен определяется OPENSEA_API_KEY.
APP_ENV = (os.getenv("APP_ENV") or "dev").strip().lower()

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_int(name: str, *, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer") from e
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}")
    return value


def _env_float(name: str, *, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number") from e
    if value < 0:
        raise RuntimeError(f"{name} must not be negative")
    return value


@dataclass
class Config:
    host: str = "0.0.0.0"
    port: int = 3001
    opensea_api_key: str | None = None
    opensea_base_url: str | None = None
    opensea_enabled: bool = False
    promotion_strategy: StrategyType = StrategyType.MIN
    price_cache_ttl: float = 60.0
    price_fetch_timeout: float = 10.0
    price_max_retries: int = 2
    price_retry_base_delay: float = 0.5
    breaker_failure_threshold: int = 5
    breaker_reset_timeout: float = 30.0
    quote_validity: float = 30.0
    promotions_path: str | None = None
    log_level: str = "INFO"


def load_config() -> Config:
    try:
        strategy = parse_strategy(os.getenv("PROMOTION_STRATEGY") or "MIN")
    except ValueError as e:
        raise RuntimeError(f"Invalid PROMOTION_STRATEGY: {e}") from e

    port = _env_int("PORT", default=3001)
    if port > 65535:
        raise RuntimeError("PORT must be <= 65535")

    log_level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise RuntimeError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    api_key = os.getenv("OPENSEA_API_KEY") or None
    opensea_enabled = _str_to_bool(os.getenv("ENABLE_OPENSEA"), default=True) and api_key is not None

    return Config(
        host=os.getenv("HOST") or "0.0.0.0",
        port=port,
        opensea_api_key=api_key,
        opensea_base_url=os.getenv("OPENSEA_BASE_URL") or None,
        opensea_enabled=opensea_enabled,
        promotion_strategy=strategy,
        price_cache_ttl=_env_float("PRICE_CACHE_TTL_SECONDS", default=60.0),
        price_fetch_timeout=_env_float("PRICE_FETCH_TIMEOUT_SECONDS", default=10.0),
        price_max_retries=_env_int("PRICE_MAX_RETRIES", default=2),
        price_retry_base_delay=_env_float("PRICE_RETRY_BASE_SECONDS", default=0.5),
        breaker_failure_threshold=_env_int("BREAKER_FAILURE_THRESHOLD", default=5, minimum=1),
        breaker_reset_timeout=_env_float("BREAKER_RESET_SECONDS", default=30.0),
        quote_validity=_env_float("QUOTE_VALIDITY_SECONDS", default=30.0),
        promotions_path=os.getenv("PROMOTIONS_PATH") or None,
        log_level=log_level,
    )
