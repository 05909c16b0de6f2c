from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class StatusCategory(str, Enum):
    NOT_STARTED = "not_started"
    LIVE = "live"
    HALFTIME = "halftime"
    FINISHED = "finished"
    SUSPENDED = "suspended"
    POSTPONED = "postponed"


class BetStatus(str, Enum):
    WON = "won"
    LOST = "lost"
    WINNING = "winning"
    LOSING = "losing"
    PENDING = "pending"


class BetKind(str, Enum):
    WINNER = "winner"
    DRAW = "draw"
    DOUBLE_CHANCE = "double_chance"
    OVER = "over"
    UNDER = "under"
    BTTS = "btts"
    ASIAN_HANDICAP = "asian_handicap"
    CORRECT_SCORE = "correct_score"
    UNKNOWN = "unknown"


class Side(str, Enum):
    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OddsSource(str, Enum):
    LIVE = "live"
    SIMULATED = "simulated"


class HedgeType(str, Enum):
    DOUBLE_CHANCE = "double_chance"
    OVER_UNDER = "over_under"
    BTTS = "btts"
    WINNER = "winner"


class VerdictStatus(str, Enum):
    WON = "won"
    LOST = "lost"
    PARTIAL_LOSS = "partial_loss"
    PARTIAL_WIN = "partial_win"
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    NEUTRAL = "neutral"
    PENDING = "pending"


# ═══════════════════════════════════════════════════════════════════════════════
#  Option descriptor (tagged variant over the supported bet markets)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class OptionDescriptor:
    kind: BetKind
    side: Optional[Side] = None                    # WINNER, ASIAN_HANDICAP
    sides: Optional[FrozenSet[Side]] = None        # DOUBLE_CHANCE
    threshold: Optional[float] = None              # OVER, UNDER
    yes: Optional[bool] = None                     # BTTS
    handicap: Optional[float] = None               # ASIAN_HANDICAP
    home: Optional[int] = None                     # CORRECT_SCORE
    away: Optional[int] = None                     # CORRECT_SCORE

    @classmethod
    def winner(cls, side: Side) -> "OptionDescriptor":
        return cls(BetKind.WINNER, side=side)

    @classmethod
    def draw(cls) -> "OptionDescriptor":
        return cls(BetKind.DRAW)

    @classmethod
    def double_chance(cls, first: Side, second: Side) -> "OptionDescriptor":
        return cls(BetKind.DOUBLE_CHANCE, sides=frozenset({first, second}))

    @classmethod
    def over(cls, threshold: float) -> "OptionDescriptor":
        return cls(BetKind.OVER, threshold=float(threshold))

    @classmethod
    def under(cls, threshold: float) -> "OptionDescriptor":
        return cls(BetKind.UNDER, threshold=float(threshold))

    @classmethod
    def btts(cls, yes: bool) -> "OptionDescriptor":
        return cls(BetKind.BTTS, yes=yes)

    @classmethod
    def asian_handicap(cls, side: Side, handicap: float) -> "OptionDescriptor":
        return cls(BetKind.ASIAN_HANDICAP, side=side, handicap=float(handicap))

    @classmethod
    def correct_score(cls, home: int, away: int) -> "OptionDescriptor":
        return cls(BetKind.CORRECT_SCORE, home=int(home), away=int(away))

    @classmethod
    def unknown(cls) -> "OptionDescriptor":
        return cls(BetKind.UNKNOWN)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind.value}
        if self.side is not None:
            out["side"] = self.side.value
        if self.sides is not None:
            order = [Side.HOME, Side.DRAW, Side.AWAY]
            out["sides"] = [s.value for s in order if s in self.sides]
        for name in ("threshold", "yes", "handicap", "home", "away"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out


# ═══════════════════════════════════════════════════════════════════════════════
#  Match snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Score:
    home: int = 0
    away: int = 0
    halftime_home: Optional[int] = None
    halftime_away: Optional[int] = None
    fulltime_home: Optional[int] = None
    fulltime_away: Optional[int] = None

    @property
    def total(self) -> int:
        return self.home + self.away

    def to_dict(self) -> Dict[str, Any]:
        return {
            "home": self.home,
            "away": self.away,
            "halftime": {"home": self.halftime_home, "away": self.halftime_away},
            "fulltime": {"home": self.fulltime_home, "away": self.fulltime_away},
        }


@dataclass(frozen=True)
class TeamInfo:
    id: Optional[int]
    name: str
    logo: Optional[str] = None
    winner: Optional[bool] = None


@dataclass(frozen=True)
class MatchSnapshot:
    fixture_id: int
    status: str
    score: Score
    home_team: TeamInfo
    away_team: TeamInfo
    elapsed: Optional[int] = None
    status_long: str = ""
    venue: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixture_id": self.fixture_id,
            "status": self.status,
            "status_long": self.status_long,
            "elapsed": self.elapsed,
            "venue": self.venue,
            "score": self.score.to_dict(),
            "teams": {"home": asdict(self.home_team), "away": asdict(self.away_team)},
        }


@dataclass(frozen=True)
class MatchEvent:
    time: int
    type: str
    detail: str = ""
    team: Optional[str] = None
    team_id: Optional[int] = None
    player: Optional[str] = None
    player_id: Optional[int] = None
    assist: Optional[str] = None
    comments: Optional[str] = None


@dataclass
class MatchStatistics:
    fixture_id: int
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    home: Dict[str, Any] = field(default_factory=dict)
    away: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LiveOdds:
    fixture_id: int
    update: Optional[str]
    markets: Dict[str, Dict[str, float]] = field(default_factory=dict)
    odds_map: Dict[str, float] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
#  Held options and evaluation results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class HeldOption:
    phrase: str
    descriptor: OptionDescriptor
    original_odds: float
    stake: int


@dataclass(frozen=True)
class OddsChange:
    original: float
    current: float
    diff: float
    pct_change: float
    direction: Trend
    is_significant: bool


@dataclass(frozen=True)
class SuggestedStake:
    stake: int
    kelly_pct: float
    potential_return: int
    potential_profit: int


@dataclass(frozen=True)
class ProbabilityEstimate:
    probability: int
    trend: Trend
    confidence: Confidence


@dataclass(frozen=True)
class OptionEvaluation:
    option: HeldOption
    current_odds: float
    odds_source: OddsSource
    odds_change: OddsChange
    dynamic_probability: int
    probability_trend: Trend
    probability_confidence: Confidence
    current_status: BetStatus
    static_probability: int
    suggested_stake: SuggestedStake
    potential_profit: float
    current_profit: float

    def to_dict(self) -> Dict[str, Any]:
        change = self.odds_change
        return {
            "option": self.option.phrase,
            "descriptor": self.option.descriptor.to_dict(),
            "original_odds": self.option.original_odds,
            "stake": self.option.stake,
            "current_odds": self.current_odds,
            "odds_source": self.odds_source.value,
            "odds_change": {
                "original": change.original,
                "current": change.current,
                "diff": change.diff,
                "pct_change": change.pct_change,
                "direction": change.direction.value,
                "is_significant": change.is_significant,
            },
            "dynamic_probability": self.dynamic_probability,
            "probability_trend": self.probability_trend.value,
            "probability_confidence": self.probability_confidence.value,
            "current_status": self.current_status.value,
            "static_probability": self.static_probability,
            "suggested_stake": asdict(self.suggested_stake),
            "potential_profit": self.potential_profit,
            "current_profit": self.current_profit,
        }


@dataclass(frozen=True)
class HedgeSuggestion:
    original_bet: str
    hedge_bet: str
    hedge_market_key: str
    current_odds: float
    type: HedgeType
    odds_source: OddsSource

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_bet": self.original_bet,
            "hedge_bet": self.hedge_bet,
            "hedge_market_key": self.hedge_market_key,
            "current_odds": self.current_odds,
            "type": self.type.value,
            "odds_source": self.odds_source.value,
        }


@dataclass(frozen=True)
class GlobalVerdict:
    status: VerdictStatus
    won: int
    lost: int
    winning: int
    losing: int
    pending: int
    avg_probability: int
    total: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["status"] = self.status.value
        return out


OddsMap = Dict[str, float]
