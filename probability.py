"""
In-play probability and stake sizing.

estimate_probability() turns (market, score, minute, odds drift) into an
integer percentage with a trend and a confidence band; kelly_stake() sizes a
stake from that probability with a capped Kelly fraction.
"""
from __future__ import annotations

import math
from typing import Callable, Optional

from models import BetKind, Confidence, OptionDescriptor, ProbabilityEstimate, Score, Side, SuggestedStake, Trend
from odds import clamp, handicap_margin, match_progress, result_side


MIN_PROBABILITY = 0.05
MAX_PROBABILITY = 0.95
TREND_THRESHOLD_PCT = 5.0
EXPECTED_GOALS_PER_MATCH = 2.5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ═══════════════════════════════════════════════════════════════════════════════
#  Base probability per market: (base, settled)
# ═══════════════════════════════════════════════════════════════════════════════


def _margin_base(margin: float, p: float) -> float:
    if margin > 0:
        return 0.6 + 0.15 * margin + 0.15 * p
    if margin < 0:
        return 0.4 - 0.15 * (-margin) - 0.1 * p
    return 0.35 - 0.1 * p


def _base_winner(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    margin = sc.home - sc.away if d.side == Side.HOME else sc.away - sc.home
    return _margin_base(margin, p), False


def _base_draw(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    if sc.home == sc.away:
        return 0.4 + 0.3 * p, False
    return 0.3 - 0.15 * abs(sc.home - sc.away) - 0.1 * p, False


def _base_btts(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    both = sc.home > 0 and sc.away > 0
    if d.yes:
        if both:
            return 1.0, True
        if sc.home > 0 or sc.away > 0:
            return 0.5 + 0.3 * (1 - p), False
        return 0.4 - 0.2 * p, False
    if both:
        return 0.0, True
    # mirror of the yes side
    if sc.home > 0 or sc.away > 0:
        return 1 - (0.5 + 0.3 * (1 - p)), False
    return 1 - (0.4 - 0.2 * p), False


def _base_over(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    t = d.threshold or 0.0
    if sc.total > t:
        return 1.0, True
    remaining_minutes = 90 - clamp(e or 0, 0, 90)
    expected_remaining = (EXPECTED_GOALS_PER_MATCH / 90) * remaining_minutes
    goals_needed = math.ceil(t + 0.5) - sc.total
    return min(0.9, expected_remaining / max(goals_needed, 1)), False


def _base_under(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    if sc.total >= math.ceil(d.threshold or 0.0):
        return 0.0, True
    return 0.5 + 0.4 * p, False


def _base_double_chance(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    if result_side(sc.home, sc.away) in (d.sides or frozenset()):
        return 0.75 + 0.2 * p, False
    return 0.35 - 0.1 * abs(sc.home - sc.away) - 0.1 * p, False


def _base_asian_handicap(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    return _margin_base(handicap_margin(d, sc.home, sc.away), p), False


def _base_correct_score(d: OptionDescriptor, sc: Score, e: Optional[int], p: float) -> tuple[float, bool]:
    if sc.home > (d.home or 0) or sc.away > (d.away or 0):
        return 0.0, True
    if sc.home == d.home and sc.away == d.away:
        return 0.2 + 0.6 * p, False
    return 0.1 * (1 - p), False


_BASES: dict[BetKind, Callable[[OptionDescriptor, Score, Optional[int], float], tuple[float, bool]]] = {
    BetKind.WINNER: _base_winner,
    BetKind.DRAW: _base_draw,
    BetKind.DOUBLE_CHANCE: _base_double_chance,
    BetKind.OVER: _base_over,
    BetKind.UNDER: _base_under,
    BetKind.BTTS: _base_btts,
    BetKind.ASIAN_HANDICAP: _base_asian_handicap,
    BetKind.CORRECT_SCORE: _base_correct_score,
}


# ═══════════════════════════════════════════════════════════════════════════════
#  Trend / confidence
# ═══════════════════════════════════════════════════════════════════════════════


def odds_trend(original_odds: float, current_odds: float) -> Trend:
    """Shortening odds mean the market rates the bet more likely."""
    if original_odds <= 0:
        return Trend.STABLE
    delta_pct = (original_odds - current_odds) / original_odds * 100
    if delta_pct > TREND_THRESHOLD_PCT:
        return Trend.UP
    if delta_pct < -TREND_THRESHOLD_PCT:
        return Trend.DOWN
    return Trend.STABLE


def confidence_band(probability: float) -> Confidence:
    if probability > 0.7:
        return Confidence.HIGH
    if probability > 0.4:
        return Confidence.MEDIUM
    return Confidence.LOW


def estimate_probability(
    descriptor: OptionDescriptor,
    score: Score,
    elapsed: Optional[int],
    original_odds: float,
    current_odds: float,
) -> ProbabilityEstimate:
    p = match_progress(elapsed)
    trend = odds_trend(original_odds, current_odds)

    base_fn = _BASES.get(descriptor.kind)
    if base_fn is None:
        base, settled = 0.5, False
    else:
        base, settled = base_fn(descriptor, score, elapsed, p)

    if settled:
        value = clamp(base, 0.0, 1.0)
    else:
        if trend == Trend.UP:
            base *= 1.1
        elif trend == Trend.DOWN:
            base *= 0.9
        value = clamp(base, MIN_PROBABILITY, MAX_PROBABILITY)

    return ProbabilityEstimate(
        probability=round_half_up(value * 100),
        trend=trend,
        confidence=confidence_band(value),
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Kelly
# ═══════════════════════════════════════════════════════════════════════════════


def kelly_stake(probability: float, odds: float, capital: float, cap: float = 0.06) -> SuggestedStake:
    """Capped Kelly stake for a win probability in [0, 1] at decimal odds."""
    b = odds - 1
    q = 1 - probability
    full = max(0.0, (b * probability - q) / b) if b > 0 else 0.0
    fraction = min(full, max(cap, 0.0))
    stake = round_half_up(capital * fraction)
    return SuggestedStake(
        stake=stake,
        kelly_pct=round_half_up(fraction * 1000) / 10,
        potential_return=round_half_up(stake * odds),
        potential_profit=round_half_up(stake * b),
    )
