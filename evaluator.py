from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from models import BetKind, BetStatus, OptionDescriptor, Score, Side
from odds import handicap_margin, result_side


@dataclass(frozen=True)
class Settlement:
    status: BetStatus
    probability: float
    reason: str


W = BetStatus.WON
L = BetStatus.LOST
WIN = BetStatus.WINNING
LOS = BetStatus.LOSING
P = BetStatus.PENDING


def _s(status: BetStatus, probability: float, reason: str) -> Settlement:
    """Shorthand settlement builder."""
    return Settlement(status=status, probability=probability, reason=reason)


def _settled(won: bool, reason: str) -> Settlement:
    return _s(W, 1.0, reason) if won else _s(L, 0.0, reason)


# ═══════════════════════════════════════════════════════════════════════════════
#  Per-market evaluators
# ═══════════════════════════════════════════════════════════════════════════════


def _eval_winner(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    lead = sc.home - sc.away if d.side == Side.HOME else sc.away - sc.home
    label = f"Score={sc.home}:{sc.away}"
    if lead > 0:
        return _s(W, 1.0, label) if finished else _s(WIN, 0.7, f"Leading by {lead}")
    if lead < 0:
        return _s(L, 0.0, label) if finished else _s(LOS, 0.2, f"Trailing by {-lead}")
    if finished:
        return _s(L, 0.0, f"Draw {label}")
    return _s(P, 0.4, "Level score")


def _eval_draw(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    label = f"Score={sc.home}:{sc.away}"
    if sc.home == sc.away:
        # a level score in play is still volatile: pending, not winning
        return _s(W, 1.0, label) if finished else _s(P, 0.4, f"Level {label}")
    return _s(L, 0.0, label) if finished else _s(LOS, 0.3, f"Not level {label}")


def _eval_over(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    t = d.threshold or 0.0
    total = sc.total
    if total > t:
        return _s(W, 1.0, f"Total={total} > {t}")
    if finished:
        return _s(L, 0.0, f"Final total={total}, line={t}")
    return _s(P, 0.7 if total >= t else 0.4, f"Total={total}, line={t}")


def _eval_under(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    t = d.threshold or 0.0
    total = sc.total
    if total >= math.ceil(t):
        return _s(L, 0.0, f"Total={total} reached line={t}")
    if finished:
        return _s(W, 1.0, f"Final total={total}, line={t}")
    return _s(P, 0.5, f"Total={total}, line={t}")


def _eval_btts(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    both = sc.home > 0 and sc.away > 0
    label = f"Goals={sc.home}:{sc.away}"
    if both:
        return _settled(bool(d.yes), label)
    if finished:
        return _settled(not d.yes, label)
    return _s(P, 0.5, label)


def _eval_double_chance(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    actual = result_side(sc.home, sc.away)
    if finished:
        return _settled(actual in (d.sides or frozenset()), f"Result: {actual.value}")
    return _s(P, 0.5, f"Current result: {actual.value}")


def _eval_asian_handicap(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    margin = handicap_margin(d, sc.home, sc.away)
    if not finished:
        return _s(P, 0.5, f"Adjusted margin={margin:+g}")
    if margin == 0:
        return _s(P, 0.5, "Adjusted score tied: stake returned")
    return _settled(margin > 0, f"Adjusted margin={margin:+g}")


def _eval_correct_score(d: OptionDescriptor, sc: Score, finished: bool) -> Settlement:
    exact = sc.home == d.home and sc.away == d.away
    if finished:
        return _settled(exact, f"Final score={sc.home}:{sc.away}")
    reachable = sc.home <= (d.home or 0) and sc.away <= (d.away or 0)
    return _s(P, 0.5 if reachable else 0.0, f"Score={sc.home}:{sc.away}")


MARKET_EVALUATORS: dict[BetKind, Callable[[OptionDescriptor, Score, bool], Settlement]] = {
    BetKind.WINNER: _eval_winner,
    BetKind.DRAW: _eval_draw,
    BetKind.DOUBLE_CHANCE: _eval_double_chance,
    BetKind.OVER: _eval_over,
    BetKind.UNDER: _eval_under,
    BetKind.BTTS: _eval_btts,
    BetKind.ASIAN_HANDICAP: _eval_asian_handicap,
    BetKind.CORRECT_SCORE: _eval_correct_score,
}


def evaluate_bet(descriptor: OptionDescriptor, score: Score, finished: bool) -> Settlement:
    evaluator = MARKET_EVALUATORS.get(descriptor.kind)
    if evaluator is None:
        return _s(P, 0.5, "Unrecognised option")
    return evaluator(descriptor, score, finished)
