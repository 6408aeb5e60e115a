"""
Daily slate lookup.
Finds the matchups played on a date for every league the pick generator covers.
"""
from datetime import date
from typing import List, Optional
import structlog

from config.settings import get_settings
from config.constants import League
from data.models.schemas import Matchup
from data.cache import get_cache
from data.collectors import nhl_api
from data.collectors.balldontlie import fetch_all_paginated, league_url
from data.collectors.nhl_api import localized
from analysis.aggregates import normalize_abbr

logger = structlog.get_logger()
settings = get_settings()
cache = get_cache()


def _balldontlie_matchups(league: str, game_date: date, away_key: str) -> List[Matchup]:
    games = fetch_all_paginated(
        league_url(league, "/games"),
        params={"dates[]": [game_date.isoformat()]}
    )

    matchups = []
    for game in games:
        home = game.get("home_team") or {}
        away = game.get(away_key) or {}
        home_abbr = normalize_abbr(home.get("abbreviation"))
        away_abbr = normalize_abbr(away.get("abbreviation"))
        if not home_abbr or not away_abbr:
            logger.warning("game_missing_teams", league=league, game_id=game.get("id"))
            continue
        matchups.append(Matchup(
            league=league,
            home_abbr=home_abbr,
            away_abbr=away_abbr,
            game_date=game_date,
            game_id=str(game.get("id")) if game.get("id") is not None else None,
            home_name=home.get("full_name") or home.get("display_name"),
            away_name=away.get("full_name") or away.get("display_name"),
        ))
    return matchups


def _nhl_matchups(game_date: date) -> List[Matchup]:
    matchups = []
    for game in nhl_api.get_schedule(game_date):
        home = game.get("homeTeam") or {}
        away = game.get("awayTeam") or {}
        home_abbr = normalize_abbr(localized(home.get("abbrev")))
        away_abbr = normalize_abbr(localized(away.get("abbrev")))
        if not home_abbr or not away_abbr:
            continue
        matchups.append(Matchup(
            league=League.NHL,
            home_abbr=home_abbr,
            away_abbr=away_abbr,
            game_date=game_date,
            game_id=str(game.get("id")) if game.get("id") is not None else None,
            home_name=localized(home.get("placeName")) or None,
            away_name=localized(away.get("placeName")) or None,
        ))
    return matchups


def get_todays_matchups(league: str, game_date: Optional[date] = None) -> List[Matchup]:
    """Get the games a league plays on a date.

    Args:
        league: nba, nhl or mlb
        game_date: Date to check. Defaults to today.

    Returns:
        List of Matchup objects
    """
    if game_date is None:
        game_date = date.today()

    cache_key = f"matchups:{league}:{game_date.isoformat()}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    if league == League.NBA:
        matchups = _balldontlie_matchups(League.NBA, game_date, away_key="visitor_team")
    elif league == League.MLB:
        matchups = _balldontlie_matchups(League.MLB, game_date, away_key="away_team")
    elif league == League.NHL:
        matchups = _nhl_matchups(game_date)
    else:
        raise ValueError(f"No schedule source for league: {league}")

    logger.info("fetched_matchups", league=league, date=str(game_date), count=len(matchups))
    cache.cache_schedule(cache_key, matchups)
    return matchups
