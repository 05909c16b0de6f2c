from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
import structlog

from config import DEFAULT_BASE_URL, DEFAULT_HOST, Settings
from models import LiveOdds, MatchEvent, MatchSnapshot, MatchStatistics, OddsMap, Score, TeamInfo
from odds import flatten_bets
from status import match_status

logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════════════════════


class APIFootballError(Exception):
    kind = "api_error"


class ConfigMissingError(APIFootballError, ValueError):
    kind = "config_missing"


class FetchFailedError(APIFootballError):
    kind = "fetch_failed"


class ProviderError(APIFootballError):
    kind = "provider_error"


def settle_feeds(
    jobs: Dict[str, Tuple[Callable[..., Any], Tuple[Any, ...]]],
    fixture_id: int,
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Run named fetches concurrently and settle each one on its own.

    A failing fetch degrades to [] for "events" and None otherwise; its
    error message is returned in the second mapping.
    """
    results: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
        futures = {name: executor.submit(fn, *args) for name, (fn, args) in jobs.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as exc:
                logger.warning("live_feed_failed", fixture_id=fixture_id, feed=name, error=str(exc))
                results[name] = [] if name == "events" else None
                errors[name] = str(exc)
    return results, errors


class APIFootballClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        host: str = DEFAULT_HOST,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or Settings.from_env().api_key
        if not self.api_key:
            raise ConfigMissingError("Missing API key. Set API_FOOTBALL_KEY or pass api_key explicitly.")
        self.host = host
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, api_key: str | None = None) -> "APIFootballClient":
        return cls(
            api_key=api_key or settings.api_key,
            base_url=settings.base_url,
            host=settings.host,
            timeout=settings.timeout,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {"x-rapidapi-host": self.host, "x-rapidapi-key": self.api_key}

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in params.items() if v is not None}
        logger.info("api_football_request", path=path, params=query)
        try:
            response = requests.get(url, params=query, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise FetchFailedError(f"API-Football request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchFailedError(f"API-Football returned invalid JSON from {path}") from exc

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            logger.error("api_football_errors", path=path, errors=errors)
            raise ProviderError(f"API-Football: {errors}")
        if not isinstance(payload, dict) or "response" not in payload:
            raise FetchFailedError(f"Unexpected API response shape from {url}")
        return payload["response"]

    # ── helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _to_int(value: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            cleaned = value.strip().replace("%", "")
            if cleaned.isdigit():
                return int(cleaned)
        return None

    @staticmethod
    def _team(raw: Dict[str, Any] | None) -> TeamInfo:
        raw = raw or {}
        return TeamInfo(
            id=raw.get("id"),
            name=raw.get("name") or "",
            logo=raw.get("logo"),
            winner=raw.get("winner"),
        )

    # ── fixture snapshot ─────────────────────────────────────────────────────

    def get_live_stats(self, fixture_id: int) -> MatchSnapshot | None:
        """Current score, status and teams of a fixture; None when the id is unknown."""
        rows = self._get("fixtures", {"id": fixture_id})
        if not rows:
            return None
        return self.parse_fixture(rows[0], fixture_id)

    @classmethod
    def parse_fixture(cls, row: Dict[str, Any], fixture_id: int | None = None) -> MatchSnapshot:
        fixture = row.get("fixture") or {}
        goals = row.get("goals") or {}
        score = row.get("score") or {}
        teams = row.get("teams") or {}
        status = fixture.get("status") or {}
        halftime = score.get("halftime") or {}
        fulltime = score.get("fulltime") or {}

        code = (status.get("short") or "").upper()
        elapsed = cls._to_int(status.get("elapsed"))
        if code in {"FT", "AET", "PEN"} and (elapsed is None or elapsed < 90):
            elapsed = 90

        return MatchSnapshot(
            fixture_id=fixture.get("id") or fixture_id or 0,
            status=code,
            status_long=status.get("long") or "",
            elapsed=elapsed,
            venue=(fixture.get("venue") or {}).get("name"),
            score=Score(
                home=max(cls._to_int(goals.get("home")) or 0, 0),
                away=max(cls._to_int(goals.get("away")) or 0, 0),
                halftime_home=halftime.get("home"),
                halftime_away=halftime.get("away"),
                fulltime_home=fulltime.get("home"),
                fulltime_away=fulltime.get("away"),
            ),
            home_team=cls._team(teams.get("home")),
            away_team=cls._team(teams.get("away")),
        )

    def get_match_status(self, fixture_id: int) -> Dict[str, Any] | None:
        try:
            snapshot = self.get_live_stats(fixture_id)
        except APIFootballError as exc:
            logger.warning("match_status_unavailable", fixture_id=fixture_id, error=str(exc))
            return None
        if snapshot is None:
            return None
        return match_status(snapshot)

    # ── statistics ───────────────────────────────────────────────────────────

    def get_match_statistics(self, fixture_id: int) -> MatchStatistics | None:
        rows = self._get("fixtures/statistics", {"fixture": fixture_id})
        if not rows:
            return None

        stats_by_team: list[dict[str, Any]] = []
        names: list[Optional[str]] = []
        for row in rows[:2]:
            team_stats: dict[str, Any] = {}
            for stat in row.get("statistics") or []:
                key = (stat.get("type") or "").strip()
                team_stats[key] = stat.get("value")
            stats_by_team.append(team_stats)
            names.append((row.get("team") or {}).get("name"))
        while len(stats_by_team) < 2:
            stats_by_team.append({})
            names.append(None)

        return MatchStatistics(
            fixture_id=fixture_id,
            home_team=names[0],
            away_team=names[1],
            home=stats_by_team[0],
            away=stats_by_team[1],
        )

    @classmethod
    def format_stats_for_display(cls, statistics: MatchStatistics | None) -> Dict[str, Dict[str, int]] | None:
        if statistics is None:
            return None

        def pair(key: str, default: int = 0) -> Dict[str, int]:
            home = cls._to_int(statistics.home.get(key))
            away = cls._to_int(statistics.away.get(key))
            return {
                "home": home if home is not None else default,
                "away": away if away is not None else default,
            }

        return {
            "possession": pair("Ball Possession", 50),
            "shots": pair("Total Shots"),
            "shots_on_target": pair("Shots on Goal"),
            "corners": pair("Corner Kicks"),
            "fouls": pair("Fouls"),
            "yellow_cards": pair("Yellow Cards"),
            "red_cards": pair("Red Cards"),
            "passes": pair("Total passes"),
            "pass_accuracy": pair("Passes %"),
        }

    # ── events / lineups ─────────────────────────────────────────────────────

    def get_live_events(self, fixture_id: int) -> List[MatchEvent]:
        rows = self._get("fixtures/events", {"fixture": fixture_id}) or []
        events: List[MatchEvent] = []
        for ev in rows:
            time = ev.get("time") or {}
            team = ev.get("team") or {}
            player = ev.get("player") or {}
            events.append(
                MatchEvent(
                    time=(time.get("elapsed") or 0) + (time.get("extra") or 0),
                    type=ev.get("type") or "",
                    detail=ev.get("detail") or "",
                    team=team.get("name"),
                    team_id=team.get("id"),
                    player=player.get("name"),
                    player_id=player.get("id"),
                    assist=(ev.get("assist") or {}).get("name"),
                    comments=ev.get("comments"),
                )
            )
        return events

    def get_live_lineups(self, fixture_id: int) -> Dict[str, Any] | None:
        rows = self._get("fixtures/lineups", {"fixture": fixture_id})
        if not rows:
            return None

        def fmt(lineup: Dict[str, Any]) -> Dict[str, Any]:
            def player(p: Dict[str, Any]) -> Dict[str, Any]:
                info = p.get("player") or {}
                return {k: info.get(k) for k in ("id", "name", "number", "pos", "grid")}

            return {
                "team": lineup.get("team"),
                "formation": lineup.get("formation"),
                "start_xi": [player(p) for p in lineup.get("startXI") or []],
                "substitutes": [player(p) for p in lineup.get("substitutes") or []],
                "coach": lineup.get("coach"),
            }

        return {
            "home": fmt(rows[0]),
            "away": fmt(rows[1]) if len(rows) > 1 else None,
        }

    # ── odds ─────────────────────────────────────────────────────────────────

    def get_live_odds(self, fixture_id: int, bookmaker_id: int | None = None) -> List[LiveOdds]:
        rows = self._get("odds/live", {"fixture": fixture_id, "bookmaker": bookmaker_id}) or []
        results: List[LiveOdds] = []
        for row in rows:
            bets = row.get("odds") or []
            markets: Dict[str, Dict[str, float]] = {}
            for bet in bets:
                name = str(bet.get("name") or "").strip()
                if name:
                    markets[name] = flatten_bets([{"values": bet.get("values")}])
            results.append(
                LiveOdds(
                    fixture_id=(row.get("fixture") or {}).get("id") or fixture_id,
                    update=row.get("update"),
                    markets=markets,
                    odds_map=flatten_bets(bets),
                )
            )
        return results

    def get_prematch_odds(self, fixture_id: int) -> Dict[str, Dict[str, Dict[str, float]]] | None:
        """Pre-match odds as {bookmaker: {bet name: {value: odd}}}."""
        rows = self._get("odds", {"fixture": fixture_id})
        if not rows:
            return None
        result: Dict[str, Dict[str, Dict[str, float]]] = {}
        for row in rows:
            for bookmaker in row.get("bookmakers") or []:
                book = result.setdefault(bookmaker.get("name") or "", {})
                for bet in bookmaker.get("bets") or []:
                    book.setdefault(bet.get("name") or "", {}).update(
                        flatten_bets([{"values": bet.get("values")}])
                    )
        return result

    @staticmethod
    def select_odds_map(
        prematch: Dict[str, Dict[str, Dict[str, float]]] | None,
        bookmaker_name: str | None = None,
    ) -> OddsMap | None:
        """Flatten one bookmaker's markets; the first bookmaker when the name is absent."""
        if not prematch:
            return None
        book = prematch.get(bookmaker_name) if bookmaker_name else None
        if book is None:
            book = next(iter(prematch.values()))
        bets = [
            {"name": name, "values": [{"value": k, "odd": v} for k, v in values.items()]}
            for name, values in book.items()
        ]
        return flatten_bets(bets)

    # ── composite ────────────────────────────────────────────────────────────

    def get_full_live_data(self, fixture_id: int, bookmaker_id: int | None = None) -> Dict[str, Any]:
        """Every live feed of a fixture; a failing feed becomes None (or [] for events)."""
        jobs = {
            "match": (self.get_live_stats, (fixture_id,)),
            "statistics": (self.get_match_statistics, (fixture_id,)),
            "events": (self.get_live_events, (fixture_id,)),
            "lineups": (self.get_live_lineups, (fixture_id,)),
            "odds": (self.get_live_odds, (fixture_id, bookmaker_id)),
        }
        results, _ = settle_feeds(jobs, fixture_id)
        results["fetched_at"] = datetime.now(timezone.utc).isoformat()
        return results

    # ── provider status ──────────────────────────────────────────────────────

    def get_api_status(self) -> Any:
        return self._get("status", {})

    def check_connection(self) -> bool:
        try:
            self.get_api_status()
        except APIFootballError:
            return False
        return True
