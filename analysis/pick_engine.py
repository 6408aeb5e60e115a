"""
AI pick generator.

A heuristic, non-ML comparison of two teams' stat rows: each team gets a
"power" score from fixed linear weights, and the gap between the two drives
the moneyline, a placeholder spread/puck line and a totals call against a
placeholder line. Missing fields fall back to league-neutral values.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple
import structlog

from config.constants import (
    League, PickLabel,
    NBA_WEIGHTS, NBA_HOME_EDGE, NBA_NEUTRAL, NBA_POINTS_PER_POWER, NBA_TOTAL_LINE,
    NHL_WEIGHTS, NHL_HOME_EDGE, NHL_NEUTRAL, NHL_PUCK_LINE, NHL_TOTAL_LINE,
    MLB_WEIGHTS, MLB_HOME_EDGE, MLB_NEUTRAL, MLB_TOTAL_LINE,
    MONEYLINE_CONFIDENCE_RANGE, LINE_CONFIDENCE_RANGE,
)
from data.models.schemas import GamePrediction, Matchup, PickSuggestion, TotalSide
from analysis.aggregates import clamp, extract_team_key, form_win_pct, parse_record, to_float
from generation.narrative_builder import build_explanation, display_name

logger = structlog.get_logger()

Row = Mapping[str, Any]


def _num(row: Row, key: str, neutral: Mapping[str, float]) -> float:
    value = to_float(row.get(key)) if row else None
    return neutral[key] if value is None else value


def _confidence(raw: float, bounds: Tuple[int, int]) -> int:
    return int(round(clamp(raw, bounds[0], bounds[1])))


def _moneyline(home_name: str, away_name: str, gap: float) -> PickSuggestion:
    favourite = home_name if gap >= 0 else away_name
    return PickSuggestion(
        label=PickLabel.MONEYLINE,
        value=f"{favourite} to win",
        confidence=_confidence(50 + abs(gap) * 100, MONEYLINE_CONFIDENCE_RANGE),
    )


def _total(label: str, projected: float, line: float, per_unit: float) -> PickSuggestion:
    side = TotalSide.OVER if projected > line else TotalSide.UNDER
    return PickSuggestion(
        label=label,
        value=f"{side.value} {line:g}",
        confidence=_confidence(50 + abs(projected - line) * per_unit, LINE_CONFIDENCE_RANGE),
    )


# --- NBA -------------------------------------------------------------------

def nba_power(row: Row, is_home: bool = False) -> float:
    """Power score for an NBA team row (roughly 0-1)."""
    win_rate = _num(row, "win_rate", NBA_NEUTRAL)
    form = form_win_pct(row.get("recent_form") if row else None, default=win_rate)
    net = _num(row, "offensive_rating", NBA_NEUTRAL) - _num(row, "defensive_rating", NBA_NEUTRAL)
    net_norm = clamp(0.5 + net / 30, 0.0, 1.0)

    power = (NBA_WEIGHTS["win_rate"] * win_rate
             + NBA_WEIGHTS["form"] * form
             + NBA_WEIGHTS["net_rating"] * net_norm)
    if is_home:
        power += NBA_HOME_EDGE
    return power


def nba_projected_total(home: Row, away: Row) -> float:
    home_pts = (_num(home, "offensive_rating", NBA_NEUTRAL) + _num(away, "defensive_rating", NBA_NEUTRAL)) / 2
    away_pts = (_num(away, "offensive_rating", NBA_NEUTRAL) + _num(home, "defensive_rating", NBA_NEUTRAL)) / 2
    return home_pts + away_pts


def _nba_picks(home: Row, away: Row, home_name: str, away_name: str) -> Tuple[List[PickSuggestion], Dict[str, float]]:
    gap = nba_power(home, is_home=True) - nba_power(away)
    favourite = home_name if gap >= 0 else away_name

    spread = max(1.5, round(abs(gap) * NBA_POINTS_PER_POWER * 2) / 2)
    projected = nba_projected_total(home, away)

    picks = [
        _moneyline(home_name, away_name, gap),
        PickSuggestion(
            label=PickLabel.SPREAD,
            value=f"{favourite} -{spread:.1f}",
            confidence=_confidence(50 + abs(gap) * 60, LINE_CONFIDENCE_RANGE),
        ),
        _total(PickLabel.TOTAL, projected, NBA_TOTAL_LINE, per_unit=2.0),
    ]
    return picks, {"power_gap": gap, "spread": spread, "projected_total": projected,
                   "total_line": NBA_TOTAL_LINE}


# --- NHL -------------------------------------------------------------------

def nhl_power(row: Row, is_home: bool = False) -> float:
    """Power score for an NHL team row (roughly 0-1)."""
    point_pct = _num(row, "point_pct", NHL_NEUTRAL)
    goal_diff = _num(row, "goals_for_per_game", NHL_NEUTRAL) - _num(row, "goals_against_per_game", NHL_NEUTRAL)
    save_pct = _num(row, "goalie_save_percentage", NHL_NEUTRAL)
    power_play = _num(row, "power_play_efficiency", NHL_NEUTRAL)

    power = (NHL_WEIGHTS["point_pct"] * point_pct
             + NHL_WEIGHTS["goal_diff"] * clamp(0.5 + goal_diff / 2, 0.0, 1.0)
             + NHL_WEIGHTS["save_pct"] * clamp((save_pct - 0.880) / 0.05, 0.0, 1.0)
             + NHL_WEIGHTS["power_play"] * clamp(power_play / 0.30, 0.0, 1.0))
    if is_home:
        power += NHL_HOME_EDGE
    return power


def nhl_projected_goals(home: Row, away: Row) -> float:
    home_goals = (_num(home, "goals_for_per_game", NHL_NEUTRAL) + _num(away, "goals_against_per_game", NHL_NEUTRAL)) / 2
    away_goals = (_num(away, "goals_for_per_game", NHL_NEUTRAL) + _num(home, "goals_against_per_game", NHL_NEUTRAL)) / 2
    avg_save = (_num(home, "goalie_save_percentage", NHL_NEUTRAL) + _num(away, "goalie_save_percentage", NHL_NEUTRAL)) / 2
    goaltending = (avg_save - NHL_NEUTRAL["goalie_save_percentage"]) * 30
    return max(0.0, home_goals + away_goals - goaltending)


def _nhl_picks(home: Row, away: Row, home_name: str, away_name: str) -> Tuple[List[PickSuggestion], Dict[str, float]]:
    gap = nhl_power(home, is_home=True) - nhl_power(away)
    favourite, underdog = (home_name, away_name) if gap >= 0 else (away_name, home_name)

    if abs(gap) >= 0.15:
        puck_line = f"{favourite} -{NHL_PUCK_LINE:g}"
        puck_conf = 50 + (abs(gap) - 0.15) * 100
    else:
        puck_line = f"{underdog} +{NHL_PUCK_LINE:g}"
        puck_conf = 50 + (0.15 - abs(gap)) * 150

    projected = nhl_projected_goals(home, away)

    picks = [
        _moneyline(home_name, away_name, gap),
        PickSuggestion(
            label=PickLabel.PUCK_LINE,
            value=puck_line,
            confidence=_confidence(puck_conf, LINE_CONFIDENCE_RANGE),
        ),
        _total(PickLabel.TOTAL_GOALS, projected, NHL_TOTAL_LINE, per_unit=20.0),
    ]
    return picks, {"power_gap": gap, "projected_total": projected, "total_line": NHL_TOTAL_LINE}


# --- MLB -------------------------------------------------------------------

def _mlb_values(row: Row) -> Dict[str, float]:
    return {
        "win_pct": parse_record(row.get("win_loss_record") if row else None, default=MLB_NEUTRAL["win_pct"]),
        "era": _num(row, "era", MLB_NEUTRAL),
        "batting_average": _num(row, "batting_average", MLB_NEUTRAL),
    }


def mlb_power(row: Row, is_home: bool = False) -> float:
    """Power score for an MLB team row (roughly 0-1)."""
    values = _mlb_values(row)
    power = (MLB_WEIGHTS["win_pct"] * values["win_pct"]
             + MLB_WEIGHTS["era"] * clamp((5.5 - values["era"]) / 3, 0.0, 1.0)
             + MLB_WEIGHTS["batting_average"] * clamp((values["batting_average"] - 0.220) / 0.06, 0.0, 1.0))
    if is_home:
        power += MLB_HOME_EDGE
    return power


def mlb_first_inning_probability(home: Row, away: Row) -> float:
    """Chance of a run in the first inning, from a 50% baseline."""
    home_values, away_values = _mlb_values(home), _mlb_values(away)
    avg_ba = (home_values["batting_average"] + away_values["batting_average"]) / 2
    avg_era = (home_values["era"] + away_values["era"]) / 2
    probability = (0.5
                   + (avg_ba - MLB_NEUTRAL["batting_average"]) * 4
                   + (avg_era - MLB_NEUTRAL["era"]) * 0.08)
    return clamp(probability, 0.05, 0.95)


def mlb_projected_runs(home: Row, away: Row) -> float:
    home_values, away_values = _mlb_values(home), _mlb_values(away)
    league_ba = MLB_NEUTRAL["batting_average"]
    home_runs = away_values["era"] * home_values["batting_average"] / league_ba
    away_runs = home_values["era"] * away_values["batting_average"] / league_ba
    return home_runs + away_runs


def _mlb_picks(home: Row, away: Row, home_name: str, away_name: str) -> Tuple[List[PickSuggestion], Dict[str, float]]:
    gap = mlb_power(home, is_home=True) - mlb_power(away)
    probability = mlb_first_inning_probability(home, away)
    projected = mlb_projected_runs(home, away)

    picks = [
        _moneyline(home_name, away_name, gap),
        PickSuggestion(
            label=PickLabel.FIRST_INNING,
            value="First inning run (Yes)" if probability >= 0.5 else "First inning run (No)",
            confidence=_confidence(max(probability, 1 - probability) * 100, LINE_CONFIDENCE_RANGE),
        ),
        _total(PickLabel.TOTAL_RUNS, projected, MLB_TOTAL_LINE, per_unit=10.0),
    ]
    return picks, {"power_gap": gap, "first_inning_probability": probability,
                   "projected_total": projected, "total_line": MLB_TOTAL_LINE}


_PICKERS = {
    League.NBA: _nba_picks,
    League.NHL: _nhl_picks,
    League.MLB: _mlb_picks,
}


def generate_game_picks(league: str, matchup: Matchup, home_row: Row, away_row: Row) -> GamePrediction:
    """Compare two team rows and produce labelled suggestions.

    Args:
        league: nba, nhl or mlb
        matchup: The game being picked
        home_row: Home team's stat row
        away_row: Away team's stat row

    Returns:
        GamePrediction with picks and a templated explanation
    """
    picker = _PICKERS.get(league)
    if picker is None:
        raise ValueError(f"No pick model for league: {league}")

    home_row = home_row or {}
    away_row = away_row or {}
    home_name = display_name(home_row.get("team_name"), matchup.home_name or matchup.home_abbr)
    away_name = display_name(away_row.get("team_name"), matchup.away_name or matchup.away_abbr)

    picks, projections = picker(home_row, away_row, home_name, away_name)

    prediction = GamePrediction(
        league=league,
        matchup=matchup,
        home_team=home_name,
        away_team=away_name,
        picks=picks,
        projections=projections,
    )
    prediction.explanation = build_explanation(prediction, home_row, away_row)
    return prediction


def generate_predictions(
    league: str,
    matchups: List[Matchup],
    team_rows: List[dict]
) -> List[GamePrediction]:
    """Generate predictions for a slate, matching teams by abbreviation.

    Matchups whose teams have no stat row are logged and skipped.
    """
    rows_by_key: Dict[str, dict] = {}
    for row in team_rows:
        key = extract_team_key(row.get("team_name"))
        if key:
            rows_by_key[key] = row

    predictions = []
    for matchup in matchups:
        home_row: Optional[dict] = rows_by_key.get(matchup.home_abbr)
        away_row: Optional[dict] = rows_by_key.get(matchup.away_abbr)
        if home_row is None or away_row is None:
            logger.warning("matchup_teams_unmatched", league=league, matchup=matchup.label,
                           home_found=home_row is not None, away_found=away_row is not None)
            continue
        predictions.append(generate_game_picks(league, matchup, home_row, away_row))

    logger.info("predictions_generated", league=league, games=len(matchups), count=len(predictions))
    return predictions
