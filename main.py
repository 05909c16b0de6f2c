from __future__ import annotations

import argparse
import json
from pathlib import Path

from api_client import APIFootballClient
from config import Settings, configure_logging
from models import HeldOption
from tracker import get_full_live_tracking, held_option


def load_input(path: Path, settings: Settings) -> dict:
    payload = json.loads(path.read_text(encoding="utf-8"))

    options: list[HeldOption] = []
    for item in payload.get("options", []):
        options.append(held_option(str(item["option"]), float(item["odds"]), int(item["stake"])))

    return {
        "fixture_id": int(payload["fixture_id"]),
        "held_options": options,
        "bookmaker_name": payload.get("bookmaker"),
        "capital": float(payload.get("capital", settings.capital)),
        "kelly_cap": float(payload.get("kelly_cap", settings.kelly_cap)),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Track held bet options on a live fixture")
    parser.add_argument("--input", required=True, help="Path to tracking request JSON")
    parser.add_argument("--api-key", required=False, help="API-Football key (optional if API_FOOTBALL_KEY is set)")
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    request = load_input(Path(args.input), settings)
    client = APIFootballClient.from_settings(settings, api_key=args.api_key)
    result = get_full_live_tracking(client, **request)

    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
