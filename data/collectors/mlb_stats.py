"""
MLB statistics collector using the BallDontLie MLB API.
Team rows combine team info, standings and batting/pitching totals
aggregated from player season stats; props come from the same stats.
"""
from typing import Dict, List, Optional

import structlog

from config.settings import get_settings
from config.constants import League, DEFAULT_PROP_CONFIDENCE, UNKNOWN
from data.models.schemas import MLBTeamStats, PlayerProp
from data.cache import get_cache
from data.collectors.balldontlie import fetch_all_paginated, league_url
from analysis.aggregates import (
    aggregate_mlb_team_stats, compute_batting_average, compute_era,
    format_team_name, normalize_abbr, parse_innings, to_float
)

logger = structlog.get_logger()
settings = get_settings()
cache = get_cache()


def get_teams() -> List[dict]:
    teams = fetch_all_paginated(league_url(League.MLB, "/teams"))
    logger.info("mlb_teams_fetched", count=len(teams))
    return teams


def get_standings(season: Optional[int] = None) -> List[dict]:
    season = season or settings.mlb_season
    standings = fetch_all_paginated(league_url(League.MLB, "/standings"), params={"season": season})
    logger.info("mlb_standings_fetched", season=season, count=len(standings))
    return standings


def get_season_stats(season: Optional[int] = None) -> List[dict]:
    """Player season stats, cached so team totals and props share one fetch."""
    season = season or settings.mlb_season
    cache_key = f"mlb_season_stats:{season}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    stats = fetch_all_paginated(league_url(League.MLB, "/season_stats"), params={"season": season})
    logger.info("mlb_season_stats_fetched", season=season, count=len(stats))
    cache.cache_stats(cache_key, stats)
    return stats


def _index_by_abbr(items: List[dict], get_abbr, kind: str) -> Dict[str, dict]:
    indexed = {}
    for item in items:
        abbr = normalize_abbr(get_abbr(item))
        if abbr:
            indexed[abbr] = item
        else:
            logger.warning("mlb_missing_abbreviation", kind=kind, id=item.get("id"))
    return indexed


def build_team_stats(
    teams: List[dict],
    standings: List[dict],
    player_stats: List[dict]
) -> List[MLBTeamStats]:
    """Combine team info, standings and aggregated player totals.

    One row per unique team abbreviation.

    Args:
        teams: BallDontLie MLB team payloads
        standings: Standings payloads
        player_stats: Player season stat payloads

    Returns:
        List of MLBTeamStats rows
    """
    team_map = _index_by_abbr(teams, lambda t: t.get("abbreviation"), "team")
    standings_map = _index_by_abbr(
        standings, lambda s: (s.get("team") or {}).get("abbreviation"), "standing")
    aggregated = aggregate_mlb_team_stats(player_stats)

    rows = []
    for abbr, team in team_map.items():
        standing = standings_map.get(abbr) or {}
        totals = aggregated.get(abbr) or {}
        rows.append(MLBTeamStats(
            team_name=format_team_name(team.get("display_name"), team.get("abbreviation")),
            win_loss_record=f"{standing.get('wins') or 0}-{standing.get('losses') or 0}",
            era=totals.get("era"),
            batting_average=totals.get("batting_average"),
        ))

    logger.info("mlb_team_rows_built", count=len(rows))
    return rows


def _player_prop_values(stats: dict) -> Dict[str, Optional[float]]:
    innings = parse_innings(stats.get("pitching_ip"))
    hits = to_float(stats.get("batting_h")) or 0.0
    at_bats = to_float(stats.get("batting_ab")) or 0.0
    return {
        "AVG": compute_batting_average(hits, at_bats) or 0.0,
        "HR": to_float(stats.get("batting_hr")) or 0.0,
        "RBI": to_float(stats.get("batting_rbi")) or 0.0,
        "ERA": compute_era(to_float(stats.get("pitching_er")) or 0.0, innings),
        "W": to_float(stats.get("pitching_w")) or 0.0,
    }


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}"


def build_player_props(player_stats: List[dict]) -> List[PlayerProp]:
    """Turn player season stats into AVG/HR/RBI/ERA/W props.

    ERA is skipped when a player has no innings pitched; W is skipped when it
    is zero for a non-pitcher.

    Args:
        player_stats: Player season stat payloads

    Returns:
        De-duplicated list of PlayerProp rows
    """
    props: Dict[str, PlayerProp] = {}

    for stats in player_stats:
        player = stats.get("player")
        if not player:
            continue

        player_name = f"{player.get('first_name') or 'Unknown'} {player.get('last_name') or 'Player'}".strip()
        team = normalize_abbr((player.get("team") or {}).get("abbreviation")) or UNKNOWN
        pitched = parse_innings(stats.get("pitching_ip")) > 0

        for prop_type, value in _player_prop_values(stats).items():
            if prop_type == "ERA" and value is None:
                continue
            if prop_type == "W" and value == 0 and not pitched:
                continue

            prop = PlayerProp(
                player_name=player_name,
                team=team,
                prop_type=prop_type,
                prop_value=value,
                analysis=f"Season {prop_type}: {_format_value(value)}",
                confidence=DEFAULT_PROP_CONFIDENCE,
            )
            props[prop.key] = prop

    logger.info("mlb_props_built", count=len(props))
    return list(props.values())


def collect_teams() -> List[MLBTeamStats]:
    return build_team_stats(get_teams(), get_standings(), get_season_stats())


def collect_props() -> List[PlayerProp]:
    return build_player_props(get_season_stats())
