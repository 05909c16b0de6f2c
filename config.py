from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

import structlog


DEFAULT_BASE_URL = "https://v3.football.api-sports.io"
DEFAULT_HOST = "v3.football.api-sports.io"
DEFAULT_CAPITAL = 10000
DEFAULT_KELLY_CAP = 0.06


# ═══════════════════════════════════════════════════════════════════════════════
#  Bookmakers (API-Football ids)
# ═══════════════════════════════════════════════════════════════════════════════

BOOKMAKER_IDS: dict[str, int] = {
    "1xbet": 80,
    "bet365": 8,
    "betway": 17,
    "unibet": 16,
    "bwin": 1,
    "williamhill": 11,
    "betfair": 6,
    "pinnacle": 4,
}


def normalize_bookmaker(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


def bookmaker_id(name: Optional[str]) -> Optional[int]:
    """Resolve a bookmaker display name ("William Hill", "Bet-365") to its id."""
    if not name:
        return None
    return BOOKMAKER_IDS.get(normalize_bookmaker(name))


# ═══════════════════════════════════════════════════════════════════════════════
#  Settings
# ═══════════════════════════════════════════════════════════════════════════════


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    base_url: str = DEFAULT_BASE_URL
    host: str = DEFAULT_HOST
    timeout: float = 15.0
    capital: int = DEFAULT_CAPITAL
    kelly_cap: float = DEFAULT_KELLY_CAP
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("API_FOOTBALL_KEY", "").strip() or os.getenv("API_SPORTS_KEY", "").strip()
        return cls(
            api_key=api_key or None,
            base_url=os.getenv("API_FOOTBALL_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            host=os.getenv("API_FOOTBALL_HOST", "").strip() or DEFAULT_HOST,
            timeout=_env_float("API_FOOTBALL_TIMEOUT", 15.0),
            capital=int(_env_float("TRACKING_CAPITAL", DEFAULT_CAPITAL)),
            kelly_cap=_env_float("KELLY_CAP", DEFAULT_KELLY_CAP),
            log_level=os.getenv("LOG_LEVEL", "").strip().upper() or "INFO",
        )


# ═══════════════════════════════════════════════════════════════════════════════
#  Logging
# ═══════════════════════════════════════════════════════════════════════════════


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
