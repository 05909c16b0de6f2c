from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from models import BetKind, OddsMap, OptionDescriptor, Score, Side
from option_parser import format_line


MIN_ODDS = 1.01
MAX_ODDS = 50.0
MIN_FACTOR = 0.1
MAX_FACTOR = 10.0
REGULATION_MINUTES = 90


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_odds(value: float) -> float:
    return round(clamp(value, MIN_ODDS, MAX_ODDS), 2)


def match_progress(elapsed: Optional[int]) -> float:
    """Fraction of regulation time played, in [0, 1]."""
    return clamp((elapsed or 0) / REGULATION_MINUTES, 0.0, 1.0)


def _to_odds(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        odds = float(str(value).strip().replace(",", "."))
    except ValueError:
        return None
    if math.isnan(odds) or odds <= 0:
        return None
    return odds


# ═══════════════════════════════════════════════════════════════════════════════
#  Resolver: alias keys per market
# ═══════════════════════════════════════════════════════════════════════════════

_WINNER_KEYS: dict[Side, list[str]] = {
    Side.HOME: ["Home", "1", "home", "Win 1", "Match Winner Home"],
    Side.AWAY: ["Away", "2", "away", "Win 2", "Match Winner Away"],
}

_DRAW_KEYS = ["Draw", "X", "draw", "Match Winner Draw"]

_DOUBLE_CHANCE_KEYS: dict[frozenset, list[str]] = {
    frozenset({Side.HOME, Side.DRAW}): [
        "Home or Draw", "1X", "home_draw", "Double Chance 1X", "Home/Draw", "Double Chance Home/Draw",
    ],
    frozenset({Side.AWAY, Side.DRAW}): [
        "Away or Draw", "Draw or Away", "X2", "draw_away", "away_draw", "Double Chance X2",
        "Draw/Away", "Double Chance Draw/Away",
    ],
    frozenset({Side.HOME, Side.AWAY}): [
        "Home or Away", "12", "home_away", "Double Chance 12", "Home/Away", "Double Chance Home/Away",
    ],
}

_BTTS_KEYS: dict[bool, list[str]] = {
    True: ["Yes", "BTTS Yes", "Both Teams Score Yes", "Both Teams To Score Yes"],
    False: ["No", "BTTS No", "Both Teams Score No", "Both Teams To Score No"],
}


def _first_hit(odds_map: Mapping[str, Any], keys: List[str]) -> Optional[float]:
    for key in keys:
        if key in odds_map:
            odds = _to_odds(odds_map[key])
            if odds is not None:
                return odds
    return None


def _scan(odds_map: Mapping[str, Any], *needles: str) -> Optional[float]:
    for key, value in odds_map.items():
        lowered = str(key).lower()
        if all(n in lowered for n in needles):
            odds = _to_odds(value)
            if odds is not None:
                return odds
    return None


def _resolve_total(odds_map: Mapping[str, Any], word: str, threshold: float) -> Optional[float]:
    line = format_line(threshold)
    keys = [f"{word.capitalize()} {line}", f"{word} {line}", f"{word[0].upper()}{line}"]
    hit = _first_hit(odds_map, keys)
    if hit is not None:
        return hit
    return _scan(odds_map, word, line)


def _resolve_handicap(odds_map: Mapping[str, Any], side: Side, handicap: float) -> Optional[float]:
    signed = f"{handicap:+g}"
    plain = format_line(handicap)
    token = side.value
    for key, value in odds_map.items():
        lowered = str(key).lower()
        line_hit = signed in lowered or (handicap >= 0 and plain in lowered and f"-{plain}" not in lowered)
        if ("handicap" in lowered or "asian" in lowered) and token in lowered and line_hit:
            odds = _to_odds(value)
            if odds is not None:
                return odds
    label = token.capitalize()
    return _first_hit(odds_map, [f"{label} {signed}", f"{label} {plain}"])


def resolve_odds(descriptor: OptionDescriptor, odds_map: Optional[Mapping[str, Any]]) -> Optional[float]:
    """Look up the current odds of a market in a bookmaker key→odds map.

    Returns None when the market is absent, so callers can fall back to
    simulate_odds().
    """
    if not odds_map:
        return None

    d = descriptor
    hit: Optional[float] = None
    if d.kind == BetKind.WINNER and d.side in _WINNER_KEYS:
        hit = _first_hit(odds_map, _WINNER_KEYS[d.side])
    elif d.kind == BetKind.DRAW:
        hit = _first_hit(odds_map, _DRAW_KEYS)
    elif d.kind == BetKind.DOUBLE_CHANCE and d.sides in _DOUBLE_CHANCE_KEYS:
        hit = _first_hit(odds_map, _DOUBLE_CHANCE_KEYS[d.sides])
    elif d.kind == BetKind.OVER and d.threshold is not None:
        hit = _resolve_total(odds_map, "over", d.threshold)
    elif d.kind == BetKind.UNDER and d.threshold is not None:
        hit = _resolve_total(odds_map, "under", d.threshold)
    elif d.kind == BetKind.BTTS and d.yes is not None:
        hit = _first_hit(odds_map, _BTTS_KEYS[d.yes])
    elif d.kind == BetKind.ASIAN_HANDICAP and d.side is not None and d.handicap is not None:
        hit = _resolve_handicap(odds_map, d.side, d.handicap)
    elif d.kind == BetKind.CORRECT_SCORE:
        hit = _first_hit(odds_map, [f"{d.home}-{d.away}", f"{d.home}:{d.away}"])

    return clamp_odds(hit) if hit is not None else None


# ═══════════════════════════════════════════════════════════════════════════════
#  Simulator: deterministic in-play odds when no live market exists
# ═══════════════════════════════════════════════════════════════════════════════


def _winner_factor(lead: int, p: float) -> float:
    if lead > 0:
        return 0.6 - 0.3 * p - 0.1 * lead
    if lead < 0:
        return 1.5 + 0.5 * p + 0.2 * (-lead)
    return 1 + 0.2 * p


def _factor_winner(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    lead = h - a if d.side == Side.HOME else a - h
    return _winner_factor(lead, p)


def _factor_draw(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    if h == a:
        return 0.8 - 0.4 * p
    return 2 + 1 * p + 0.5 * abs(h - a)


def _factor_over(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    t = d.threshold or 0.0
    if h + a > t:
        return MIN_FACTOR
    return 1 + p * (math.ceil(t) - (h + a) + 1) * 0.3


def _factor_under(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    t = d.threshold or 0.0
    if h + a >= math.ceil(t):
        return MAX_FACTOR
    return 0.8 - 0.3 * p


def _factor_btts(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    both = h > 0 and a > 0
    if d.yes:
        if both:
            return MIN_FACTOR
        if h > 0 or a > 0:
            return 0.7 - 0.2 * p
        return 1 + 0.5 * p
    if both:
        return MAX_FACTOR
    return 0.6 - 0.3 * p


def handicap_margin(d: OptionDescriptor, h: int, a: int) -> float:
    line = d.handicap or 0.0
    return h + line - a if d.side == Side.HOME else a + line - h


def _factor_asian_handicap(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    margin = handicap_margin(d, h, a)
    if margin > 0:
        return 0.7 - 0.3 * p
    if margin < 0:
        return 1.5 + 0.5 * p
    return 1.0


def result_side(h: int, a: int) -> Side:
    if h > a:
        return Side.HOME
    if h < a:
        return Side.AWAY
    return Side.DRAW


def _factor_double_chance(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    if result_side(h, a) in (d.sides or frozenset()):
        return 0.8 - 0.3 * p
    return 1.4 + 0.6 * p + 0.2 * abs(h - a)


def _factor_correct_score(d: OptionDescriptor, h: int, a: int, p: float) -> float:
    target_h, target_a = d.home or 0, d.away or 0
    if h > target_h or a > target_a:
        return MAX_FACTOR
    if h == target_h and a == target_a:
        return 1 - 0.5 * p
    return 1 + p


_FACTORS = {
    BetKind.WINNER: _factor_winner,
    BetKind.DRAW: _factor_draw,
    BetKind.DOUBLE_CHANCE: _factor_double_chance,
    BetKind.OVER: _factor_over,
    BetKind.UNDER: _factor_under,
    BetKind.BTTS: _factor_btts,
    BetKind.ASIAN_HANDICAP: _factor_asian_handicap,
    BetKind.CORRECT_SCORE: _factor_correct_score,
}


def simulation_factor(descriptor: OptionDescriptor, score: Score, elapsed: Optional[int]) -> float:
    factor_fn = _FACTORS.get(descriptor.kind)
    if factor_fn is None:
        return 1.0
    factor = factor_fn(descriptor, score.home, score.away, match_progress(elapsed))
    return clamp(factor, MIN_FACTOR, MAX_FACTOR)


def simulate_odds(
    descriptor: OptionDescriptor,
    original_odds: float,
    score: Score,
    elapsed: Optional[int],
) -> float:
    """Impute current odds from the pre-match price, the score and the minute."""
    return clamp_odds(original_odds * simulation_factor(descriptor, score, elapsed))


def current_odds(
    descriptor: OptionDescriptor,
    original_odds: float,
    score: Score,
    elapsed: Optional[int],
    odds_map: Optional[Mapping[str, Any]],
) -> tuple[float, bool]:
    """(odds, is_live). Live lookup first, simulation on a miss."""
    live = resolve_odds(descriptor, odds_map)
    if live is not None:
        return live, True
    return simulate_odds(descriptor, original_odds, score, elapsed), False


# ═══════════════════════════════════════════════════════════════════════════════
#  Raw provider payloads → OddsMap
# ═══════════════════════════════════════════════════════════════════════════════


def flatten_bets(bets: List[Dict[str, Any]]) -> OddsMap:
    """
    Flatten API-Football bet blocks into one alias→odds map.

    Each value is registered under its bare label ("Home", "Over 2.5") and
    under "<bet name> <label>" ("Match Winner Home"). The first bet carrying a
    bare label keeps it. Suspended prices are skipped.
    """
    out: OddsMap = {}
    for bet in bets or []:
        name = str(bet.get("name") or "").strip()
        for value in bet.get("values") or []:
            if value.get("suspended") is True:
                continue
            odds = _to_odds(value.get("odd"))
            if odds is None:
                continue
            label = str(value.get("value") or "").strip()
            handicap = value.get("handicap")
            if handicap not in (None, "") and str(handicap) not in label:
                label = f"{label} {handicap}"
            if not label:
                continue
            out.setdefault(label, odds)
            if name:
                out.setdefault(f"{name} {label}", odds)
    return out
