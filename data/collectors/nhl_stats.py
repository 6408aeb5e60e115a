"""
NHL statistics collector using the public NHL web API.
Team rows come from standings joined with goalie leaders; props come from
the skater stats leaders.
"""
import math
from typing import Dict, List, Optional

import structlog

from config.settings import get_settings
from config.constants import (
    MAX_PROP_CONFIDENCE, NHL_GAA_CATEGORIES, NHL_SAVE_PCT_CATEGORIES, UNKNOWN, UNKNOWN_TEAM
)
from data.models.schemas import NHLTeamStats, PlayerProp
from data.collectors import nhl_api
from data.collectors.nhl_api import localized, normalize_leader_categories
from analysis.aggregates import format_team_name, normalize_abbr, to_float

logger = structlog.get_logger()
settings = get_settings()


def _leaders_by_team(categories: Dict[str, dict], names) -> Dict[str, dict]:
    """Index the first (best) leader per team for the first category found."""
    for name in names:
        category = categories.get(name)
        if not category:
            continue
        by_team: Dict[str, dict] = {}
        for leader in category["leaders"]:
            abbr = normalize_abbr(localized(leader.get("teamAbbrev")))
            if abbr and abbr not in by_team:
                by_team[abbr] = leader
        return by_team
    return {}


def _player_name(entry: dict) -> str:
    return f"{localized(entry.get('firstName'))} {localized(entry.get('lastName'))}".strip()


def _power_play_fraction(value) -> Optional[float]:
    pct = to_float(value)
    if pct is None:
        return None
    return pct / 100 if pct > 1 else pct


def _per_game(total, games_played) -> Optional[float]:
    total = to_float(total)
    games_played = to_float(games_played)
    if total is None or not games_played:
        return None
    return total / games_played


def build_team_stats(standings: List[dict], goalie_payload) -> List[NHLTeamStats]:
    """Join standings with the goalie leaders of each team.

    Args:
        standings: Entries of /v1/standings/now
        goalie_payload: Response of /v1/goalie-stats-leaders

    Returns:
        List of NHLTeamStats rows
    """
    categories = normalize_leader_categories(goalie_payload)
    save_leaders = _leaders_by_team(categories, NHL_SAVE_PCT_CATEGORIES)
    gaa_leaders = _leaders_by_team(categories, NHL_GAA_CATEGORIES)

    logger.info("nhl_goalie_leaders_indexed", save_pct=len(save_leaders), gaa=len(gaa_leaders))

    rows = []
    for team in standings:
        abbr = normalize_abbr(localized(team.get("teamAbbrev")))
        goalie = save_leaders.get(abbr) if abbr else None
        gaa = gaa_leaders.get(abbr) if abbr else None

        streak = team.get("streakCode")
        if streak and team.get("streakCount"):
            streak = f"{streak}{team['streakCount']}"

        rows.append(NHLTeamStats(
            team_name=format_team_name(localized(team.get("teamName")), abbr, default=UNKNOWN_TEAM),
            puck_line_trend=streak or UNKNOWN,
            goalie_name=_player_name(goalie) if goalie else UNKNOWN,
            goalie_save_percentage=to_float(goalie.get("value")) if goalie else None,
            goals_against_average=to_float(gaa.get("value")) if gaa else None,
            power_play_efficiency=_power_play_fraction(team.get("powerPlayPct")),
            point_pct=to_float(team.get("pointPctg")),
            goals_for_per_game=_per_game(team.get("goalFor"), team.get("gamesPlayed")),
            goals_against_per_game=_per_game(team.get("goalAgainst"), team.get("gamesPlayed")),
        ))

    return rows


def prop_confidence(value) -> int:
    """Confidence 1-5 scaled from a leader's stat value."""
    number = to_float(value) or 0.0
    return max(1, min(MAX_PROP_CONFIDENCE, math.ceil(number / 10)))


def build_player_props(skater_payload, per_category: Optional[int] = None) -> List[PlayerProp]:
    """Turn the top skaters of every leader category into props.

    Args:
        skater_payload: Response of /v1/skater-stats-leaders
        per_category: Leaders kept per category

    Returns:
        De-duplicated list of PlayerProp rows
    """
    per_category = per_category or settings.nhl_leaders_per_category
    categories = normalize_leader_categories(skater_payload)
    props: Dict[str, PlayerProp] = {}

    for category in categories.values():
        label = category["label"] or "Stat"
        for player in category["leaders"][:per_category]:
            value = to_float(player.get("value")) or 0.0
            prop = PlayerProp(
                player_name=_player_name(player),
                team=normalize_abbr(localized(player.get("teamAbbrev"))) or UNKNOWN,
                prop_type=f"Season {label}",
                prop_value=value,
                analysis=f"{value:g} {label.lower()} in {player.get('gamesPlayed') or 0} games.",
                confidence=prop_confidence(value),
            )
            props[prop.key] = prop

    logger.info("nhl_props_built", categories=len(categories), count=len(props))
    return list(props.values())


def collect_teams() -> List[NHLTeamStats]:
    return build_team_stats(nhl_api.get_standings(), nhl_api.get_goalie_leaders())


def collect_props() -> List[PlayerProp]:
    return build_player_props(nhl_api.get_skater_leaders())
