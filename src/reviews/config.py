"""Runtime settings for the Reviews engine.

Persistence, brokers and event processing are configured in domain.toml.
The tunables below are read from the environment on every call so that
tests and operators can change them without re-initializing the domain.
"""

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


@dataclass(frozen=True)
class ReviewSettings:
    auto_approve: bool = True
    default_page_size: int = 10
    max_page_size: int = 1000
    admin_max_page_size: int = 100
    store_timeout_seconds: float = 5.0
    vote_retries: int = 3
    order_ledger_url: str | None = None
    order_ledger_timeout_seconds: float = 2.0
    order_ledger_api_key: str | None = None
    responder_name: str = "TheCalista Team"

    @classmethod
    def from_env(cls) -> "ReviewSettings":
        return cls(
            auto_approve=_env_bool("REVIEWS_AUTO_APPROVE", True),
            default_page_size=_env_int("REVIEWS_DEFAULT_PAGE_SIZE", 10),
            max_page_size=_env_int("REVIEWS_MAX_PAGE_SIZE", 1000),
            admin_max_page_size=_env_int("REVIEWS_ADMIN_MAX_PAGE_SIZE", 100),
            store_timeout_seconds=_env_float("REVIEWS_STORE_TIMEOUT_SECONDS", 5.0),
            vote_retries=_env_int("REVIEWS_VOTE_RETRIES", 3),
            order_ledger_url=os.getenv("ORDER_LEDGER_URL") or None,
            order_ledger_timeout_seconds=_env_float("ORDER_LEDGER_TIMEOUT_SECONDS", 2.0),
            order_ledger_api_key=os.getenv("ORDER_LEDGER_API_KEY") or None,
            responder_name=os.getenv("REVIEWS_RESPONDER_NAME", "TheCalista Team"),
        )


def get_settings() -> ReviewSettings:
    return ReviewSettings.from_env()
