from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

import structlog

from models import (
    BetKind,
    HedgeSuggestion,
    HedgeType,
    HeldOption,
    MatchSnapshot,
    OddsSource,
    OptionDescriptor,
    Side,
)
from odds import current_odds
from option_parser import format_line, format_option
from status import can_activate_hedging

logger = structlog.get_logger()


# Pre-match reference prices used as O₀ when a hedge market has to be simulated
DOUBLE_CHANCE_ANCHORS: dict[frozenset, float] = {
    frozenset({Side.HOME, Side.DRAW}): 1.35,
    frozenset({Side.AWAY, Side.DRAW}): 1.45,
    frozenset({Side.HOME, Side.AWAY}): 1.30,
}
OVER_ANCHORS: dict[float, float] = {0.5: 1.08, 1.5: 1.30, 2.5: 1.90, 3.5: 2.75, 4.5: 4.50}
UNDER_ANCHORS: dict[float, float] = {0.5: 7.00, 1.5: 3.40, 2.5: 1.95, 3.5: 1.40, 4.5: 1.15}
BTTS_ANCHORS: dict[bool, float] = {True: 1.80, False: 1.95}
WINNER_ANCHORS: dict[Side, float] = {Side.HOME: 2.40, Side.AWAY: 3.10}
DRAW_ANCHOR = 3.30
DEFAULT_ANCHOR = 1.90


def hedge_for(descriptor: OptionDescriptor) -> Optional[tuple[OptionDescriptor, HedgeType]]:
    """Complementary market covering the outcomes the held option loses on."""
    d = descriptor
    if d.kind == BetKind.WINNER:
        if d.side == Side.HOME:
            return OptionDescriptor.double_chance(Side.AWAY, Side.DRAW), HedgeType.DOUBLE_CHANCE
        return OptionDescriptor.double_chance(Side.HOME, Side.DRAW), HedgeType.DOUBLE_CHANCE
    if d.kind == BetKind.DRAW:
        return OptionDescriptor.double_chance(Side.HOME, Side.AWAY), HedgeType.DOUBLE_CHANCE
    if d.kind == BetKind.ASIAN_HANDICAP:
        if d.side == Side.AWAY:
            return OptionDescriptor.double_chance(Side.HOME, Side.DRAW), HedgeType.DOUBLE_CHANCE
        return OptionDescriptor.double_chance(Side.AWAY, Side.DRAW), HedgeType.DOUBLE_CHANCE
    if d.kind == BetKind.OVER and d.threshold is not None:
        return OptionDescriptor.under(d.threshold), HedgeType.OVER_UNDER
    if d.kind == BetKind.UNDER and d.threshold is not None:
        return OptionDescriptor.over(d.threshold), HedgeType.OVER_UNDER
    if d.kind == BetKind.BTTS and d.yes is not None:
        return OptionDescriptor.btts(not d.yes), HedgeType.BTTS
    if d.kind == BetKind.DOUBLE_CHANCE and d.sides:
        if d.sides == {Side.HOME, Side.DRAW}:
            return OptionDescriptor.winner(Side.AWAY), HedgeType.WINNER
        if d.sides == {Side.AWAY, Side.DRAW}:
            return OptionDescriptor.winner(Side.HOME), HedgeType.WINNER
        return OptionDescriptor.draw(), HedgeType.WINNER
    return None


def anchor_odds(descriptor: OptionDescriptor) -> float:
    d = descriptor
    if d.kind == BetKind.DOUBLE_CHANCE and d.sides in DOUBLE_CHANCE_ANCHORS:
        return DOUBLE_CHANCE_ANCHORS[d.sides]
    if d.kind == BetKind.OVER:
        return OVER_ANCHORS.get(d.threshold, DEFAULT_ANCHOR)
    if d.kind == BetKind.UNDER:
        return UNDER_ANCHORS.get(d.threshold, DEFAULT_ANCHOR)
    if d.kind == BetKind.BTTS and d.yes is not None:
        return BTTS_ANCHORS[d.yes]
    if d.kind == BetKind.WINNER and d.side in WINNER_ANCHORS:
        return WINNER_ANCHORS[d.side]
    if d.kind == BetKind.DRAW:
        return DRAW_ANCHOR
    return DEFAULT_ANCHOR


def hedge_market_key(descriptor: OptionDescriptor) -> str:
    """Stable identifier of a hedge market, e.g. "double_chance_x2" or "under_2.5"."""
    d = descriptor
    if d.kind == BetKind.DOUBLE_CHANCE:
        sides = d.sides or frozenset()
        code = "1x" if sides == {Side.HOME, Side.DRAW} else "x2" if sides == {Side.AWAY, Side.DRAW} else "12"
        return f"double_chance_{code}"
    if d.kind in (BetKind.OVER, BetKind.UNDER):
        return f"{d.kind.value}_{format_line(d.threshold or 0.0)}"
    if d.kind == BetKind.BTTS:
        return f"btts_{'yes' if d.yes else 'no'}"
    if d.kind == BetKind.WINNER:
        return f"winner_{d.side.value if d.side else 'home'}"
    return d.kind.value


def plan_hedges(
    snapshot: MatchSnapshot,
    options: Iterable[HeldOption],
    odds_map: Optional[Mapping[str, Any]] = None,
) -> List[HedgeSuggestion]:
    """One hedge per held option, or nothing while hedging is not yet allowed."""
    if not can_activate_hedging(snapshot.status, snapshot.elapsed):
        return []

    suggestions: List[HedgeSuggestion] = []
    for option in options:
        plan = hedge_for(option.descriptor)
        if plan is None:
            continue
        hedge, hedge_type = plan
        odds, is_live = current_odds(
            hedge, anchor_odds(hedge), snapshot.score, snapshot.elapsed, odds_map
        )
        suggestions.append(
            HedgeSuggestion(
                original_bet=option.phrase,
                hedge_bet=format_option(hedge),
                hedge_market_key=hedge_market_key(hedge),
                current_odds=odds,
                type=hedge_type,
                odds_source=OddsSource.LIVE if is_live else OddsSource.SIMULATED,
            )
        )

    logger.debug("hedges_planned", fixture_id=snapshot.fixture_id, count=len(suggestions))
    return suggestions
