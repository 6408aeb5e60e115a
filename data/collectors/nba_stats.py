"""
NBA statistics collector using the BallDontLie API.
Builds team stat rows from the season's game results and player prop rows
from season averages.
"""
from typing import Dict, List, Optional

import structlog

from config.settings import get_settings
from config.constants import League, NBA_AVERAGE_PROPS, NBA_TEAM_DEFAULTS, DEFAULT_PROP_CONFIDENCE, UNKNOWN
from data.models.schemas import NBATeamStats, PlayerProp
from data.collectors.balldontlie import fetch_all_paginated, league_url
from data.collectors.http_client import ApiError
from analysis.aggregates import format_team_name, nba_team_records, to_float

logger = structlog.get_logger()
settings = get_settings()


def get_teams() -> List[dict]:
    """Get basic info for every NBA team."""
    teams = fetch_all_paginated(league_url(League.NBA, "/teams"))
    logger.info("nba_teams_fetched", count=len(teams))
    return teams


def get_season_games(season: Optional[int] = None) -> List[dict]:
    """Get all games for a season (regular season and playoffs)."""
    season = season or settings.nba_season
    games = fetch_all_paginated(
        league_url(League.NBA, "/games"),
        params={"seasons[]": [season]}
    )
    logger.info("nba_games_fetched", season=season, count=len(games))
    return games


def get_season_averages(season: Optional[int] = None) -> List[dict]:
    """Get base per-game season averages for every player."""
    season = season or settings.nba_season
    averages = fetch_all_paginated(
        league_url(League.NBA, "/season_averages/general"),
        params={"season": season, "season_type": "regular", "type": "base"}
    )
    logger.info("nba_season_averages_fetched", season=season, count=len(averages))
    return averages


def build_team_stats(teams: List[dict], games: List[dict]) -> List[NBATeamStats]:
    """Combine team info with records computed from game results.

    Teams without any finished games keep the neutral defaults.

    Args:
        teams: BallDontLie team payloads
        games: BallDontLie game payloads

    Returns:
        List of NBATeamStats rows
    """
    records = nba_team_records(games, recent_games=settings.recent_form_games)

    rows = []
    for team in teams:
        record = records.get(team.get("id"), {})
        rows.append(NBATeamStats(
            team_name=format_team_name(team.get("full_name"), team.get("abbreviation")),
            win_rate=record.get("win_rate", NBA_TEAM_DEFAULTS["win_rate"]),
            pace=record.get("pace", NBA_TEAM_DEFAULTS["pace"]),
            offensive_rating=record.get("offensive_rating", NBA_TEAM_DEFAULTS["offensive_rating"]),
            defensive_rating=record.get("defensive_rating", NBA_TEAM_DEFAULTS["defensive_rating"]),
            recent_form=record.get("recent_form", NBA_TEAM_DEFAULTS["recent_form"]),
        ))

    without_games = sum(1 for team in teams if team.get("id") not in records)
    if without_games:
        logger.info("nba_teams_without_games", count=without_games)

    return rows


def build_player_props(averages: List[dict]) -> List[PlayerProp]:
    """Turn season averages into display props (one per tracked stat).

    Args:
        averages: BallDontLie season average payloads

    Returns:
        De-duplicated list of PlayerProp rows
    """
    props: Dict[str, PlayerProp] = {}

    for avg in averages:
        player = avg.get("player") or {}
        stats = avg.get("stats") or {}
        player_name = f"{player.get('first_name') or 'Unknown'} {player.get('last_name') or 'Player'}"
        team = (player.get("team") or {}).get("abbreviation") or UNKNOWN
        games_played = stats.get("gp", stats.get("games_played")) or 0

        for prop_type, (stat_key, noun) in NBA_AVERAGE_PROPS.items():
            value = to_float(stats.get(stat_key)) or 0.0
            prop = PlayerProp(
                player_name=player_name,
                team=team,
                prop_type=prop_type,
                prop_value=value,
                analysis=f"Avg {value:g} {noun} in {games_played} games.",
                confidence=DEFAULT_PROP_CONFIDENCE,
            )
            props[prop.key] = prop

    return list(props.values())


def collect_teams() -> List[NBATeamStats]:
    """Team rows need only /teams; without game results every team keeps the defaults."""
    teams = get_teams()
    try:
        games = get_season_games()
    except ApiError as e:
        logger.warning("nba_games_unavailable", status=e.status_code, error=str(e))
        games = []
    return build_team_stats(teams, games)


def collect_props() -> List[PlayerProp]:
    return build_player_props(get_season_averages())
