"""
Narrative builder that turns a prediction and its two team rows into the
templated explanation string shown with each pick.
"""
import re
from typing import Any, Dict, Mapping, Optional
import structlog

from config.constants import League, PickLabel
from data.models.schemas import GamePrediction
from analysis.aggregates import to_float
from generation.templates import (
    FALLBACK_EXPLANATION,
    MLB_EXPLANATION_TEMPLATE,
    NBA_EXPLANATION_TEMPLATE,
    NHL_EXPLANATION_TEMPLATE,
)

logger = structlog.get_logger()

_SUFFIX_RE = re.compile(r"\s*\([^()]*\)\s*$")


def display_name(team_name: Optional[str], fallback: Optional[str] = None) -> str:
    """Strip the "(ABBR)" suffix from a team key: "Boston Celtics (BOS)" -> "Boston Celtics"."""
    if team_name:
        name = _SUFFIX_RE.sub("", team_name).strip()
        if name and name.lower() not in ("unknown", "unknown team"):
            return name
    return fallback or team_name or "Unknown"


def _fmt(value: Any, spec: str) -> str:
    number = to_float(value)
    if number is None:
        return "N/A"
    return format(number, spec)


def _net(row: Mapping[str, Any]) -> str:
    offense = to_float(row.get("offensive_rating"))
    defense = to_float(row.get("defensive_rating"))
    if offense is None or defense is None:
        return "N/A"
    return f"{offense - defense:+.1f}"


def _total_side(prediction: GamePrediction) -> str:
    for label in (PickLabel.TOTAL, PickLabel.TOTAL_GOALS, PickLabel.TOTAL_RUNS):
        pick = prediction.pick_for(label)
        if pick:
            return pick.value.split(" ")[0].lower()
    return "over"


def _sides(prediction: GamePrediction, home_row, away_row):
    """Return (favourite name, favourite row, underdog name, underdog row)."""
    if prediction.projections.get("power_gap", 0.0) >= 0:
        return prediction.home_team, home_row, prediction.away_team, away_row
    return prediction.away_team, away_row, prediction.home_team, home_row


def build_template_context(
    prediction: GamePrediction,
    home_row: Mapping[str, Any],
    away_row: Mapping[str, Any]
) -> Dict[str, Any]:
    favourite, fav_row, underdog, dog_row = _sides(prediction, home_row, away_row)
    projections = prediction.projections

    context = {
        "favourite": favourite,
        "underdog": underdog,
        "home_team": prediction.home_team,
        "away_team": prediction.away_team,
        "projected_total": projections.get("projected_total", 0.0),
        "total_line": projections.get("total_line", 0.0),
        "total_side": _total_side(prediction),
    }

    if prediction.league == League.NBA:
        context.update({
            "fav_win_rate": _fmt(fav_row.get("win_rate"), ".0%"),
            "dog_win_rate": _fmt(dog_row.get("win_rate"), ".0%"),
            "fav_form": fav_row.get("recent_form") or "N/A",
            "dog_form": dog_row.get("recent_form") or "N/A",
            "fav_net": _net(fav_row),
            "dog_net": _net(dog_row),
        })
    elif prediction.league == League.NHL:
        context.update({
            "fav_point_pct": _fmt(fav_row.get("point_pct"), ".3f"),
            "dog_point_pct": _fmt(dog_row.get("point_pct"), ".3f"),
            "home_goalie": home_row.get("goalie_name") or "N/A",
            "away_goalie": away_row.get("goalie_name") or "N/A",
            "home_save_pct": _fmt(home_row.get("goalie_save_percentage"), ".3f"),
            "away_save_pct": _fmt(away_row.get("goalie_save_percentage"), ".3f"),
        })
    elif prediction.league == League.MLB:
        context.update({
            "fav_record": fav_row.get("win_loss_record") or "N/A",
            "dog_record": dog_row.get("win_loss_record") or "N/A",
            "fav_era": _fmt(fav_row.get("era"), ".2f"),
            "dog_era": _fmt(dog_row.get("era"), ".2f"),
            "fav_avg": _fmt(fav_row.get("batting_average"), ".3f"),
            "dog_avg": _fmt(dog_row.get("batting_average"), ".3f"),
            "first_inning": projections.get("first_inning_probability", 0.5),
        })

    return context


_TEMPLATES = {
    League.NBA: NBA_EXPLANATION_TEMPLATE,
    League.NHL: NHL_EXPLANATION_TEMPLATE,
    League.MLB: MLB_EXPLANATION_TEMPLATE,
}


def build_explanation(
    prediction: GamePrediction,
    home_row: Mapping[str, Any],
    away_row: Mapping[str, Any]
) -> str:
    """Fill the league template for a prediction.

    Args:
        prediction: Prediction with picks and projections set
        home_row: Home team's stat row
        away_row: Away team's stat row

    Returns:
        Explanation string
    """
    context = build_template_context(prediction, home_row or {}, away_row or {})
    template = _TEMPLATES.get(prediction.league, FALLBACK_EXPLANATION)
    try:
        return template.format(**context)
    except (KeyError, ValueError) as e:
        logger.warning("explanation_template_failed", league=prediction.league, error=str(e))
        return FALLBACK_EXPLANATION.format(**context)
