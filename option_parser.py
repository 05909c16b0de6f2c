from __future__ import annotations

import re
from typing import Optional

from models import BetKind, OptionDescriptor, Side


# ═══════════════════════════════════════════════════════════════════════════════
#  Patterns
# ═══════════════════════════════════════════════════════════════════════════════

_NUMBER = r"(\d+(?:[.,]\d+)?)"

_SCORE_EXACT_RE = re.compile(r"score exact\s*:?\s*(\d+)\s*[-:]\s*(\d+)")
_OVER_RE = re.compile(rf"(?:plus de|over)\s*{_NUMBER}")
_UNDER_RE = re.compile(rf"(?:moins de|under)\s*{_NUMBER}")
_HANDICAP_LINE_RE = re.compile(r"handicap\b.*?([+-]?\s*\d+(?:[.,]\d+)?)")
_WIN_RE = re.compile(r"\bwin(?:ner)?\b")
_WIN_CODE_RE = re.compile(r"\bwin\s*([12])\b")
_DRAW_RE = re.compile(r"\b(?:nul|draw)\b")

_DC_HOME_DRAW_RE = re.compile(r"\b1x\b")
_DC_AWAY_DRAW_RE = re.compile(r"\bx2\b")
_DC_HOME_AWAY_RE = re.compile(r"\b12\b")

_AWAY_TOKENS = ("extérieur", "exterieur", "away")
_HOME_TOKENS = ("domicile", "home")
_BTTS_TOKENS = (
    "btts",
    "deux équipes marquent",
    "deux equipes marquent",
    "both teams to score",
    "both teams score",
)


def _normalise(phrase: str) -> str:
    return " ".join((phrase or "").strip().lower().split())


def _number(raw: str) -> float:
    return float(raw.replace(",", ".").replace(" ", ""))


def _has_any(s: str, tokens: tuple[str, ...]) -> bool:
    return any(t in s for t in tokens)


def _is_draw_token(s: str) -> bool:
    return _DRAW_RE.search(s) is not None


# ═══════════════════════════════════════════════════════════════════════════════
#  Parser
# ═══════════════════════════════════════════════════════════════════════════════


def _parse_double_chance(s: str) -> OptionDescriptor:
    home = _has_any(s, _HOME_TOKENS)
    away = _has_any(s, _AWAY_TOKENS)
    draw = _is_draw_token(s)
    if _DC_HOME_DRAW_RE.search(s) or (home and draw):
        return OptionDescriptor.double_chance(Side.HOME, Side.DRAW)
    if _DC_AWAY_DRAW_RE.search(s) or (away and draw):
        return OptionDescriptor.double_chance(Side.AWAY, Side.DRAW)
    if _DC_HOME_AWAY_RE.search(s) or (home and away):
        return OptionDescriptor.double_chance(Side.HOME, Side.AWAY)
    return OptionDescriptor.unknown()


def _parse_handicap(s: str) -> Optional[OptionDescriptor]:
    m = _HANDICAP_LINE_RE.search(s)
    if not m:
        return None
    side = Side.AWAY if _has_any(s, _AWAY_TOKENS) else Side.HOME
    return OptionDescriptor.asian_handicap(side, _number(m.group(1)))


def parse_option(phrase: str) -> OptionDescriptor:
    """
    Classify a free-text bet option into an OptionDescriptor.

    Rules are tried in order, first match wins. Examples:

      "Score exact 2-1"                    → CORRECT_SCORE 2:1
      "Double chance 1X"                   → DOUBLE_CHANCE home/draw
      "Double chance Extérieur ou Nul"     → DOUBLE_CHANCE away/draw
      "Les deux équipes marquent - Oui"    → BTTS yes
      "BTTS No"                            → BTTS no
      "Asian Handicap Away +0.5"           → ASIAN_HANDICAP away +0.5
      "Plus de 2.5 buts" / "Over 2.5"      → OVER 2.5
      "Moins de 3,5 buts" / "Under 3.5"    → UNDER 3.5
      "Victoire PSG" / "Home win"          → WINNER home
      "Victoire extérieur" / "Away win"    → WINNER away
      "Win 1" / "Win 2"                    → WINNER home / away
      "Match nul" / "Draw"                 → DRAW

    Anything else is UNKNOWN, which evaluates as pending.
    """
    s = _normalise(phrase)
    if not s:
        return OptionDescriptor.unknown()

    m = _SCORE_EXACT_RE.search(s)
    if m:
        return OptionDescriptor.correct_score(int(m.group(1)), int(m.group(2)))

    if "double chance" in s:
        return _parse_double_chance(s)

    if _has_any(s, _BTTS_TOKENS):
        return OptionDescriptor.btts("oui" in s or "yes" in s)

    if "handicap" in s:
        descriptor = _parse_handicap(s)
        if descriptor is not None:
            return descriptor

    m = _OVER_RE.search(s)
    if m:
        return OptionDescriptor.over(_number(m.group(1)))

    m = _UNDER_RE.search(s)
    if m:
        return OptionDescriptor.under(_number(m.group(1)))

    m = _WIN_CODE_RE.search(s)
    if m:
        return OptionDescriptor.winner(Side.AWAY if m.group(1) == "2" else Side.HOME)

    if "victoire" in s or _WIN_RE.search(s):
        side = Side.AWAY if _has_any(s, _AWAY_TOKENS) else Side.HOME
        return OptionDescriptor.winner(side)

    if _is_draw_token(s):
        return OptionDescriptor.draw()

    return OptionDescriptor.unknown()


# ═══════════════════════════════════════════════════════════════════════════════
#  Canonical phrases
# ═══════════════════════════════════════════════════════════════════════════════


def format_line(value: float) -> str:
    """2.5 → "2.5", 3.0 → "3"."""
    return f"{value:g}"


def format_option(descriptor: OptionDescriptor) -> str:
    """Canonical French phrase for a descriptor; parse_option() reads it back unchanged."""
    d = descriptor
    if d.kind == BetKind.WINNER:
        return "Victoire extérieur" if d.side == Side.AWAY else "Victoire domicile"
    if d.kind == BetKind.DRAW:
        return "Match nul"
    if d.kind == BetKind.DOUBLE_CHANCE:
        sides = d.sides or frozenset()
        if sides == {Side.HOME, Side.DRAW}:
            return "Double chance 1X"
        if sides == {Side.AWAY, Side.DRAW}:
            return "Double chance X2"
        return "Double chance 12"
    if d.kind == BetKind.OVER:
        return f"Plus de {format_line(d.threshold or 0.0)} buts"
    if d.kind == BetKind.UNDER:
        return f"Moins de {format_line(d.threshold or 0.0)} buts"
    if d.kind == BetKind.BTTS:
        return f"Les deux équipes marquent - {'Oui' if d.yes else 'Non'}"
    if d.kind == BetKind.ASIAN_HANDICAP:
        side = "extérieur" if d.side == Side.AWAY else "domicile"
        return f"Handicap asiatique {side} {d.handicap or 0.0:+g}"
    if d.kind == BetKind.CORRECT_SCORE:
        return f"Score exact {d.home}-{d.away}"
    return "Option inconnue"
