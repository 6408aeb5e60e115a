"""
Client for the public NHL web API (api-web.nhle.com).
"""
from datetime import date
from typing import Any, Dict, List, Optional
import structlog

from config.settings import get_settings
from data.collectors.http_client import get_json

logger = structlog.get_logger()
settings = get_settings()


def fetch_nhl_data(endpoint: str) -> Any:
    """GET an NHL API endpoint such as ``/v1/standings/now``."""
    url = f"{settings.nhl_api_base_url.rstrip('/')}{endpoint}"
    logger.debug("fetching_nhl_data", endpoint=endpoint)
    return get_json(url)


def get_standings() -> List[dict]:
    data = fetch_nhl_data("/v1/standings/now")
    standings = data.get("standings") or []
    logger.info("fetched_nhl_standings", count=len(standings))
    return standings


def get_goalie_leaders(season: Optional[str] = None, game_type: Optional[int] = None) -> Any:
    season = season or settings.nhl_season
    game_type = game_type or settings.nhl_game_type
    return fetch_nhl_data(f"/v1/goalie-stats-leaders/{season}/{game_type}")


def get_skater_leaders(season: Optional[str] = None, game_type: Optional[int] = None) -> Any:
    season = season or settings.nhl_season
    game_type = game_type or settings.nhl_game_type
    return fetch_nhl_data(f"/v1/skater-stats-leaders/{season}/{game_type}")


def get_schedule(game_date: date) -> List[dict]:
    """Get the games played on a date.

    The schedule endpoint returns a whole game week; only the games of the
    requested day are kept.
    """
    data = fetch_nhl_data(f"/v1/schedule/{game_date.isoformat()}")
    for day in data.get("gameWeek") or []:
        if day.get("date") == game_date.isoformat():
            return day.get("games") or []
    return []


def localized(value: Any, default: str = "") -> str:
    """Read a plain or localised ({"default": ...}) name field."""
    if isinstance(value, dict):
        value = value.get("default")
    if value is None:
        return default
    return str(value)


def normalize_leader_categories(payload: Any) -> Dict[str, Dict[str, Any]]:
    """Normalise a stats-leaders payload into {category: {label, leaders}}.

    Two shapes are accepted: a list of ``{category, categoryLabel, leaders}``
    objects (under ``categories`` or ``goalieStatLeaders``), or a dict keyed
    by category name whose values are leader lists.
    """
    if not isinstance(payload, dict):
        return {}

    listed = payload.get("categories") or payload.get("goalieStatLeaders")
    categories: Dict[str, Dict[str, Any]] = {}

    if isinstance(listed, list):
        for entry in listed:
            name = entry.get("category") or entry.get("categoryLabel")
            if not name:
                continue
            categories[name] = {
                "label": entry.get("categoryLabel") or name,
                "leaders": entry.get("leaders") or [],
            }
        return categories

    for name, leaders in payload.items():
        if isinstance(leaders, list):
            categories[name] = {"label": _category_label(name), "leaders": leaders}

    return categories


def _category_label(name: str) -> str:
    """Turn a camelCase category key into a readable label (goalsPp -> Goals Pp)."""
    words = []
    current = ""
    for char in name:
        if char.isupper() and current:
            words.append(current)
            current = char
        else:
            current += char
    if current:
        words.append(current)
    return " ".join(w[:1].upper() + w[1:] for w in words)
