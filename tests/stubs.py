from __future__ import annotations

from typing import Any, Iterable

from api_client import FetchFailedError
from models import LiveOdds, MatchSnapshot, MatchStatistics, Score, TeamInfo


def make_snapshot(
    home: int = 0,
    away: int = 0,
    status: str = "1H",
    elapsed: int | None = 30,
    fixture_id: int = 1,
) -> MatchSnapshot:
    return MatchSnapshot(
        fixture_id=fixture_id,
        status=status,
        elapsed=elapsed,
        score=Score(home=home, away=away),
        home_team=TeamInfo(id=85, name="Paris Saint Germain"),
        away_team=TeamInfo(id=80, name="Lyon"),
    )


class StubClient:
    """Provider stand-in: serves canned feeds, raises for the names in `fail`."""

    def __init__(
        self,
        snapshot: MatchSnapshot | None = None,
        odds_map: dict[str, float] | None = None,
        fail: Iterable[str] = (),
    ) -> None:
        self.snapshot = snapshot
        self.odds_map = odds_map
        self.fail = set(fail)
        self.bookmaker_ids: list[Any] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise FetchFailedError(f"{name} unavailable")

    def get_live_stats(self, fixture_id: int) -> MatchSnapshot | None:
        self._maybe_fail("match")
        return self.snapshot

    def get_match_statistics(self, fixture_id: int) -> MatchStatistics | None:
        self._maybe_fail("statistics")
        return MatchStatistics(
            fixture_id=fixture_id,
            home={"Ball Possession": "58%", "Total Shots": 11},
            away={"Ball Possession": "42%", "Total Shots": 6},
        )

    def get_live_events(self, fixture_id: int) -> list:
        self._maybe_fail("events")
        return []

    def get_live_odds(self, fixture_id: int, bookmaker_id: int | None = None) -> list[LiveOdds]:
        self._maybe_fail("odds")
        self.bookmaker_ids.append(bookmaker_id)
        if self.odds_map is None:
            return []
        return [LiveOdds(fixture_id=fixture_id, update="2024-05-01T20:31:00+00:00", odds_map=self.odds_map)]
