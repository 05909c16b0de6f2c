from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog

from api_client import APIFootballClient, settle_feeds
from config import DEFAULT_CAPITAL, DEFAULT_KELLY_CAP, bookmaker_id
from evaluator import evaluate_bet
from hedging import plan_hedges
from models import (
    BetStatus,
    GlobalVerdict,
    HeldOption,
    MatchSnapshot,
    OddsChange,
    OddsMap,
    OddsSource,
    OptionDescriptor,
    OptionEvaluation,
    Trend,
    VerdictStatus,
)
from odds import current_odds
from option_parser import parse_option
from probability import estimate_probability, kelly_stake, round_half_up
from status import has_started, is_finished, match_status

logger = structlog.get_logger()

SIGNIFICANT_ODDS_MOVE = 0.05


def held_option(
    phrase: str,
    original_odds: float,
    stake: int,
    descriptor: Optional[OptionDescriptor] = None,
) -> HeldOption:
    """Build a HeldOption, parsing the phrase when no descriptor is given."""
    return HeldOption(
        phrase=phrase,
        descriptor=descriptor or parse_option(phrase),
        original_odds=float(original_odds),
        stake=int(stake),
    )


def odds_change(original: float, current: float) -> OddsChange:
    diff = round(current - original, 2)
    pct = round(diff / original * 100, 1) if original > 0 else 0.0
    if diff > 0:
        direction = Trend.UP
    elif diff < 0:
        direction = Trend.DOWN
    else:
        direction = Trend.STABLE
    return OddsChange(
        original=original,
        current=current,
        diff=diff,
        pct_change=pct,
        direction=direction,
        is_significant=abs(diff) > SIGNIFICANT_ODDS_MOVE,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Per-option pipeline: resolve → simulate → evaluate → score → stake
# ═══════════════════════════════════════════════════════════════════════════════


def evaluate_option(
    option: HeldOption,
    snapshot: MatchSnapshot,
    odds_map: Optional[OddsMap] = None,
    capital: float = DEFAULT_CAPITAL,
    kelly_cap: float = DEFAULT_KELLY_CAP,
) -> OptionEvaluation:
    d = option.descriptor
    score = snapshot.score
    odds, is_live = current_odds(d, option.original_odds, score, snapshot.elapsed, odds_map)

    settlement = evaluate_bet(d, score, is_finished(snapshot.status))
    estimate = estimate_probability(d, score, snapshot.elapsed, option.original_odds, odds)

    dynamic = estimate.probability
    if settlement.status == BetStatus.WON:
        dynamic = 100
    elif settlement.status == BetStatus.LOST:
        dynamic = 0

    if settlement.status == BetStatus.WON:
        current_profit = round(option.stake * (option.original_odds - 1), 2)
    elif settlement.status == BetStatus.LOST:
        current_profit = float(-option.stake)
    else:
        current_profit = 0.0

    return OptionEvaluation(
        option=option,
        current_odds=odds,
        odds_source=OddsSource.LIVE if is_live else OddsSource.SIMULATED,
        odds_change=odds_change(option.original_odds, odds),
        dynamic_probability=dynamic,
        probability_trend=estimate.trend,
        probability_confidence=estimate.confidence,
        current_status=settlement.status,
        static_probability=round_half_up(settlement.probability * 100),
        suggested_stake=kelly_stake(dynamic / 100, odds, capital, kelly_cap),
        potential_profit=round(option.stake * (option.original_odds - 1), 2),
        current_profit=current_profit,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Global verdict
# ═══════════════════════════════════════════════════════════════════════════════

_MESSAGES = {
    VerdictStatus.WON: "🎉 Tous les paris gagnés!",
    VerdictStatus.LOST: "❌ Tous les paris perdus",
    VerdictStatus.PARTIAL_LOSS: "⚠️ {lost} pari(s) perdu(s) sur {total}",
    VerdictStatus.PARTIAL_WIN: "✅ {won} pari(s) gagné(s), {pending} en attente",
    VerdictStatus.FAVORABLE: "📈 Tendance favorable ({winning} en bonne voie)",
    VerdictStatus.UNFAVORABLE: "📉 Tendance défavorable ({losing} en difficulté)",
    VerdictStatus.NEUTRAL: "⚖️ Situation équilibrée",
    VerdictStatus.PENDING: "⏳ En attente du coup d'envoi",
}
NO_OPTIONS_MESSAGE = "📭 Aucune option suivie"


def global_verdict(evaluations: Sequence[OptionEvaluation], started: bool = True) -> GlobalVerdict:
    statuses = [e.current_status for e in evaluations]
    counts = {s: statuses.count(s) for s in BetStatus}
    total = len(statuses)
    won, lost = counts[BetStatus.WON], counts[BetStatus.LOST]
    winning, losing = counts[BetStatus.WINNING], counts[BetStatus.LOSING]
    pending = counts[BetStatus.PENDING]

    if total == 0 or not started:
        status = VerdictStatus.PENDING
    elif won == total:
        status = VerdictStatus.WON
    elif lost == total:
        status = VerdictStatus.LOST
    elif lost > 0:
        status = VerdictStatus.PARTIAL_LOSS
    elif won > 0 and pending > 0:
        status = VerdictStatus.PARTIAL_WIN
    elif winning > losing:
        status = VerdictStatus.FAVORABLE
    elif winning < losing:
        status = VerdictStatus.UNFAVORABLE
    else:
        status = VerdictStatus.NEUTRAL

    avg = round_half_up(sum(e.dynamic_probability for e in evaluations) / total) if total else 0
    if total == 0 and started:
        message = NO_OPTIONS_MESSAGE
    else:
        message = _MESSAGES[status].format(
            won=won, lost=lost, winning=winning, losing=losing, pending=pending, total=total
        )
    return GlobalVerdict(
        status=status,
        won=won,
        lost=lost,
        winning=winning,
        losing=losing,
        pending=pending,
        avg_probability=avg,
        total=total,
        message=message,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Orchestration
# ═══════════════════════════════════════════════════════════════════════════════


def _fetch_snapshot_feeds(client: APIFootballClient, fixture_id: int, book_id: Optional[int]) -> Dict[str, Any]:
    """Fixture, statistics, events and live odds fetched concurrently.

    A failing request degrades its own field only; the fixture error, if any,
    is kept under "match_error".
    """
    jobs = {
        "match": (client.get_live_stats, (fixture_id,)),
        "statistics": (client.get_match_statistics, (fixture_id,)),
        "events": (client.get_live_events, (fixture_id,)),
        "odds": (client.get_live_odds, (fixture_id, book_id)),
    }
    feeds, errors = settle_feeds(jobs, fixture_id)
    if "match" in errors:
        feeds["match_error"] = errors["match"]
    return feeds


def _odds_map_from(live_odds: Optional[List[Any]]) -> tuple[Optional[OddsMap], Optional[str]]:
    for entry in live_odds or []:
        if entry.odds_map:
            return entry.odds_map, entry.update
    return None, None


def get_full_live_tracking(
    client: APIFootballClient,
    fixture_id: int,
    held_options: Iterable[HeldOption],
    bookmaker_name: Optional[str] = None,
    capital: float = DEFAULT_CAPITAL,
    kelly_cap: float = DEFAULT_KELLY_CAP,
) -> Dict[str, Any]:
    """
    Consolidated live picture of a fixture for a list of held options.

    Returns the tracking snapshot, or an envelope {"error": ..., "message": ...}
    with error "match_not_found" or "tracking_failed".
    """
    try:
        options = list(held_options)
        book_id = bookmaker_id(bookmaker_name)
        feeds = _fetch_snapshot_feeds(client, fixture_id, book_id)

        snapshot: Optional[MatchSnapshot] = feeds.get("match")
        if snapshot is None:
            reason = feeds.get("match_error") or f"No fixture returned for id={fixture_id}"
            logger.info("match_not_found", fixture_id=fixture_id, reason=reason)
            return {"error": "match_not_found", "fixture_id": fixture_id, "message": reason}

        odds_map, odds_update = _odds_map_from(feeds.get("odds"))
        evaluations = [evaluate_option(opt, snapshot, odds_map, capital, kelly_cap) for opt in options]
        hedges = plan_hedges(snapshot, options, odds_map)
        verdict = global_verdict(evaluations, started=has_started(snapshot.status))
        status = match_status(snapshot)

        logger.info(
            "tracking_built",
            fixture_id=fixture_id,
            status=snapshot.status,
            options=len(evaluations),
            live_odds=odds_map is not None,
            verdict=verdict.status.value,
        )
        return {
            "fixture_id": fixture_id,
            "match": snapshot.to_dict(),
            "status": status,
            "bookmaker": {"name": bookmaker_name, "id": book_id},
            "statistics": APIFootballClient.format_stats_for_display(feeds.get("statistics")),
            "events": [asdict(e) for e in feeds.get("events") or []],
            "odds": {"available": odds_map is not None, "update": odds_update},
            "options": [e.to_dict() for e in evaluations],
            "hedging": {
                "available": status["can_hedge"],
                "suggestions": [h.to_dict() for h in hedges],
            },
            "verdict": verdict.to_dict(),
            "tracked_at": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as exc:
        logger.exception("tracking_failed", fixture_id=fixture_id)
        return {"error": "tracking_failed", "fixture_id": fixture_id, "message": str(exc)}
