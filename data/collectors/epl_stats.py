"""
EPL statistics collector (BallDontLie EPL endpoints).
The teams endpoint is picky about its season parameter, so several
parameter sets are tried in order.
"""
from typing import Dict, List, Optional

import structlog

from config.settings import get_settings
from config.constants import League, EPL_PROP_FIELDS, EPL_TEAM_PARAM_VARIANTS, DEFAULT_PROP_CONFIDENCE, UNKNOWN
from data.models.schemas import EPLTeamStats, PlayerProp
from data.collectors.balldontlie import fetch_all_paginated, fetch_first_available, league_url
from analysis.aggregates import format_team_name, normalize_abbr, to_float

logger = structlog.get_logger()
settings = get_settings()


def get_teams() -> List[dict]:
    teams, method = fetch_first_available(league_url(League.EPL, "/teams"), EPL_TEAM_PARAM_VARIANTS)
    if method is None:
        logger.error("epl_teams_unavailable")
    else:
        logger.info("epl_teams_fetched", count=len(teams), method=method)
    return teams


def get_standings(season: Optional[int] = None) -> List[dict]:
    season = season or settings.epl_season
    return fetch_all_paginated(league_url(League.EPL, "/standings"), params={"season": season})


def get_season_stats(season: Optional[int] = None) -> List[dict]:
    season = season or settings.epl_season
    return fetch_all_paginated(league_url(League.EPL, "/season_stats"), params={"season": season})


def build_team_stats(teams: List[dict], standings: List[dict]) -> List[EPLTeamStats]:
    team_map = {}
    for team in teams:
        abbr = normalize_abbr(team.get("abbreviation"))
        if abbr:
            team_map[abbr] = team

    standings_map = {}
    for standing in standings:
        abbr = normalize_abbr((standing.get("team") or {}).get("abbreviation"))
        if abbr:
            standings_map[abbr] = standing
        else:
            logger.warning("epl_standing_missing_abbreviation")

    rows = []
    for abbr, team in team_map.items():
        standing = standings_map.get(abbr) or {}
        rows.append(EPLTeamStats(
            team_name=format_team_name(team.get("display_name") or team.get("name"), team.get("abbreviation")),
            wins=int(standing.get("wins") or 0),
            losses=int(standing.get("losses") or 0),
            goals_for=int(standing.get("goals_for") or 0),
            goals_against=int(standing.get("goals_against") or 0),
            points=int(standing.get("points") or 0),
        ))
    return rows


def build_player_props(player_stats: List[dict]) -> List[PlayerProp]:
    """Goals/Assists/YellowCards props; zero values are skipped."""
    props: Dict[str, PlayerProp] = {}

    for stats in player_stats:
        player = stats.get("player")
        if not player:
            continue
        player_name = f"{player.get('first_name') or 'Unknown'} {player.get('last_name') or 'Player'}".strip()
        team = normalize_abbr((player.get("team") or {}).get("abbreviation")) or UNKNOWN

        for prop_type, stat_field in EPL_PROP_FIELDS.items():
            value = to_float(stats.get(stat_field)) or 0.0
            if value == 0:
                continue
            prop = PlayerProp(
                player_name=player_name,
                team=team,
                prop_type=prop_type,
                prop_value=value,
                analysis=f"Season {prop_type}: {value:g}",
                confidence=DEFAULT_PROP_CONFIDENCE,
            )
            props[prop.key] = prop

    return list(props.values())


def collect_teams() -> List[EPLTeamStats]:
    """EPL team rows; none when no /teams parameter variant succeeds."""
    teams = get_teams()
    if not teams:
        return []
    return build_team_stats(teams, get_standings())


def collect_props() -> List[PlayerProp]:
    player_stats = get_season_stats()
    logger.info("epl_season_stats_fetched", count=len(player_stats))
    return build_player_props(player_stats)
