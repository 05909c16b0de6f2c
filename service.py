from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from api_client import APIFootballClient, APIFootballError, ConfigMissingError
from config import BOOKMAKER_IDS, Settings, bookmaker_id, configure_logging
from models import HeldOption
from option_parser import format_option, parse_option
from tracker import get_full_live_tracking, held_option

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════════════════════════
#  Pydantic models
# ═══════════════════════════════════════════════════════════════════════════════


class HeldOptionIn(BaseModel):
    option: str = Field(min_length=1, description="e.g. Victoire PSG, Plus de 2.5 buts")
    odds: float = Field(ge=1.01, description="Odds at which the option was placed")
    stake: int = Field(gt=0)

    @field_validator("option")
    @classmethod
    def strip_option(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("option must not be blank")
        return value


class TrackingRequest(BaseModel):
    fixture_id: int = Field(gt=0)
    options: List[HeldOptionIn] = Field(default_factory=list)
    bookmaker: Optional[str] = Field(default=None, description="e.g. bet365, 1xBet")
    capital: float = Field(default=settings.capital, gt=0)
    kelly_cap: float = Field(default=settings.kelly_cap, gt=0, le=1)
    api_key: Optional[str] = Field(default=None)


class ParseRequest(BaseModel):
    options: List[str] = Field(min_length=1)


# ═══════════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _client(api_key: Optional[str] = None) -> APIFootballClient:
    try:
        return APIFootballClient.from_settings(settings, api_key=api_key)
    except ConfigMissingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _to_held_options(rows: List[HeldOptionIn]) -> List[HeldOption]:
    return [held_option(row.option, row.odds, row.stake) for row in rows]


# ═══════════════════════════════════════════════════════════════════════════════
#  FastAPI app
# ═══════════════════════════════════════════════════════════════════════════════

app = FastAPI(title="Live Bet Tracker API", version="1.0.0")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/bookmakers")
def bookmakers() -> dict:
    return {"bookmakers": [{"name": name, "id": bid} for name, bid in BOOKMAKER_IDS.items()]}


@app.post("/options/parse")
def parse_options(payload: ParseRequest) -> dict:
    results = []
    for phrase in payload.options:
        descriptor = parse_option(phrase)
        results.append({
            "option": phrase,
            "descriptor": descriptor.to_dict(),
            "canonical": format_option(descriptor),
        })
    return {"results": results}


@app.get("/live/{fixture_id}")
def live_data(fixture_id: int, api_key: Optional[str] = None) -> dict:
    client = _client(api_key)
    data = client.get_full_live_data(fixture_id)
    match = data.get("match")
    if match is None:
        raise HTTPException(status_code=404, detail=f"No fixture found for id={fixture_id}")
    return {
        "match": match.to_dict(),
        "statistics": APIFootballClient.format_stats_for_display(data.get("statistics")),
        "events": [asdict(e) for e in data.get("events") or []],
        "lineups": data.get("lineups"),
        "odds": [asdict(o) for o in data.get("odds") or []],
        "fetched_at": data["fetched_at"],
    }


@app.get("/live/{fixture_id}/status")
def live_status(fixture_id: int, api_key: Optional[str] = None) -> dict:
    status = _client(api_key).get_match_status(fixture_id)
    if status is None:
        raise HTTPException(status_code=404, detail=f"No fixture found for id={fixture_id}")
    return status


@app.get("/live/{fixture_id}/odds")
def live_odds(fixture_id: int, bookmaker: Optional[str] = None, api_key: Optional[str] = None) -> dict:
    client = _client(api_key)
    book_id = bookmaker_id(bookmaker)
    try:
        odds = client.get_live_odds(fixture_id, book_id)
    except APIFootballError as exc:
        raise HTTPException(status_code=502, detail=f"Could not fetch live odds: {exc}") from exc
    return {
        "fixture_id": fixture_id,
        "bookmaker": {"name": bookmaker, "id": book_id},
        "odds": [asdict(o) for o in odds],
    }


@app.get("/live/{fixture_id}/odds/prematch")
def prematch_odds(fixture_id: int, bookmaker: Optional[str] = None, api_key: Optional[str] = None) -> dict:
    client = _client(api_key)
    try:
        markets = client.get_prematch_odds(fixture_id)
    except APIFootballError as exc:
        raise HTTPException(status_code=502, detail=f"Could not fetch pre-match odds: {exc}") from exc
    if not markets:
        raise HTTPException(status_code=404, detail=f"No pre-match odds for fixture id={fixture_id}")
    return {
        "fixture_id": fixture_id,
        "bookmaker": bookmaker,
        "bookmakers": markets,
        "odds_map": APIFootballClient.select_odds_map(markets, bookmaker),
    }


@app.post("/live/tracking")
def live_tracking(payload: TrackingRequest) -> dict:
    client = _client(payload.api_key)
    result = get_full_live_tracking(
        client,
        payload.fixture_id,
        _to_held_options(payload.options),
        bookmaker_name=payload.bookmaker,
        capital=payload.capital,
        kelly_cap=payload.kelly_cap,
    )
    error = result.get("error")
    if error == "match_not_found":
        raise HTTPException(status_code=404, detail=result)
    if error:
        raise HTTPException(status_code=500, detail=result)
    return result


@app.get("/provider/status")
def provider_status(api_key: Optional[str] = None) -> dict:
    client = _client(api_key)
    try:
        return {"connected": True, "status": client.get_api_status()}
    except APIFootballError as exc:
        logger.warning("provider_status_failed", error=str(exc))
        raise HTTPException(status_code=502, detail=f"API-Football unreachable: {exc}") from exc
