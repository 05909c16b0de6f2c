from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models import MatchSnapshot, StatusCategory


# API-Football fixture.status.short codes by lifecycle category
STATUS_CODES: dict[StatusCategory, frozenset[str]] = {
    StatusCategory.NOT_STARTED: frozenset({"TBD", "NS"}),
    StatusCategory.LIVE: frozenset({"1H", "2H", "ET", "BT", "P", "LIVE"}),
    StatusCategory.HALFTIME: frozenset({"HT"}),
    StatusCategory.FINISHED: frozenset({"FT", "AET", "PEN"}),
    StatusCategory.SUSPENDED: frozenset({"SUSP", "INT"}),
    StatusCategory.POSTPONED: frozenset({"PST", "CANC", "ABD", "AWD", "WO"}),
}

_CODE_TO_CATEGORY: dict[str, StatusCategory] = {
    code: category for category, codes in STATUS_CODES.items() for code in codes
}

HEDGING_MIN_ELAPSED = 40


def classify_status(code: Optional[str]) -> StatusCategory:
    """Unknown or missing codes are treated as not started."""
    return _CODE_TO_CATEGORY.get((code or "").strip().upper(), StatusCategory.NOT_STARTED)


def has_started(code: Optional[str]) -> bool:
    return classify_status(code) in {StatusCategory.LIVE, StatusCategory.HALFTIME, StatusCategory.FINISHED}


def is_halftime_or_later(code: Optional[str]) -> bool:
    category = classify_status(code)
    if category in {StatusCategory.HALFTIME, StatusCategory.FINISHED}:
        return True
    return (code or "").strip().upper() in {"2H", "ET"}


def is_finished(code: Optional[str]) -> bool:
    return classify_status(code) == StatusCategory.FINISHED


def can_activate_hedging(code: Optional[str], elapsed: Optional[int]) -> bool:
    category = classify_status(code)
    if category == StatusCategory.LIVE and (elapsed or 0) >= HEDGING_MIN_ELAPSED:
        return True
    if category == StatusCategory.HALFTIME:
        return True
    return (code or "").strip().upper() == "2H"


def status_message(code: Optional[str], elapsed: Optional[int]) -> str:
    """User-facing French note on when hedging becomes available."""
    if not has_started(code):
        return (
            "🔴 Le match n'a pas encore commencé. La stratégie de couverture sera "
            f"disponible à partir de la mi-temps ou de la {HEDGING_MIN_ELAPSED}ème minute."
        )
    if is_finished(code):
        return "⚫ Le match est terminé."
    if not can_activate_hedging(code, elapsed):
        wait = max(0, HEDGING_MIN_ELAPSED - (elapsed or 0))
        return (
            f"🟡 Match en cours ({elapsed or 0}'). La stratégie de couverture sera "
            f"disponible dans ~{wait} min."
        )
    return "🟢 La stratégie de couverture est disponible!"


def match_status(snapshot: MatchSnapshot) -> Dict[str, Any]:
    """Status summary of a snapshot with every lifecycle predicate resolved."""
    code = snapshot.status
    elapsed = snapshot.elapsed or 0
    return {
        "fixture_id": snapshot.fixture_id,
        "status": code,
        "status_long": snapshot.status_long,
        "category": classify_status(code).value,
        "elapsed": elapsed,
        "score": snapshot.score.to_dict(),
        "has_started": has_started(code),
        "is_halftime_or_later": is_halftime_or_later(code),
        "is_finished": is_finished(code),
        "can_hedge": can_activate_hedging(code, elapsed),
        "message": status_message(code, elapsed),
        "teams": {"home": snapshot.home_team.name, "away": snapshot.away_team.name},
        "fetched_at": datetime.now(timezone.utc).isoformat(),
    }
