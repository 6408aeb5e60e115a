"""
Output formatting.
Builds the ai_picks rows, the camelCase blobs the dashboard renders (with
inline fallbacks for missing fields) and a plain-text console view.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.constants import League, LEAGUE_LABELS, PickLabel, UNKNOWN
from data.models.schemas import DashboardSnapshot, GamePrediction, RankedPick

TOTAL_UNITS = {
    PickLabel.TOTAL: "points",
    PickLabel.TOTAL_GOALS: "goals",
    PickLabel.TOTAL_RUNS: "runs",
}


# --- ai_picks rows -----------------------------------------------------------

def build_pick_rows(
    predictions: List[GamePrediction],
    bets: List[RankedPick],
    pick_date: date
) -> List[Dict[str, Any]]:
    """One ai_picks row per suggestion; Bets of the Day are flagged."""
    chosen = {id(bet.suggestion) for bet in bets}
    rows = []
    for prediction in predictions:
        for suggestion in prediction.picks:
            rows.append({
                "pick_date": pick_date.isoformat(),
                "league": prediction.league,
                "matchup": prediction.matchup.label,
                "home_team": prediction.home_team,
                "away_team": prediction.away_team,
                "label": suggestion.label,
                "value": suggestion.value,
                "confidence": suggestion.confidence,
                "explanation": prediction.explanation,
                "is_bet_of_the_day": id(suggestion) in chosen,
            })
    return rows


# --- league blobs -------------------------------------------------------------

def _get(row: Mapping[str, Any], key: str, default: Any = None) -> Any:
    value = row.get(key)
    return default if value is None else value


def format_team(league: str, row: Mapping[str, Any]) -> Dict[str, Any]:
    """Shape one team stats row for the dashboard."""
    team = {"teamName": _get(row, "team_name", "Unknown Team")}

    if league == League.NBA:
        team.update({
            "winRate": _get(row, "win_rate", 0.5),
            "pace": _get(row, "pace", 100.0),
            "offensiveRating": _get(row, "offensive_rating", 110.0),
            "defensiveRating": _get(row, "defensive_rating", 110.0),
            "recentForm": _get(row, "recent_form", UNKNOWN),
        })
    elif league == League.NHL:
        team.update({
            "puckLineTrend": _get(row, "puck_line_trend", UNKNOWN),
            "goalieStats": {
                "name": _get(row, "goalie_name", UNKNOWN),
                "savePct": row.get("goalie_save_percentage"),
                "goalsAgainstAvg": row.get("goals_against_average"),
            },
            "powerPlayEfficiency": row.get("power_play_efficiency"),
            "pointPct": row.get("point_pct"),
        })
    elif league == League.MLB:
        team.update({
            "winLossRecord": _get(row, "win_loss_record", "0-0"),
            "era": row.get("era"),
            "battingAverage": row.get("batting_average"),
        })
    elif league == League.EPL:
        team.update({
            "wins": _get(row, "wins", 0),
            "losses": _get(row, "losses", 0),
            "goalsFor": _get(row, "goals_for", 0),
            "goalsAgainst": _get(row, "goals_against", 0),
            "points": _get(row, "points", 0),
        })

    return team


def format_player_prop(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "playerName": _get(row, "player_name", "Unknown Player"),
        "team": _get(row, "team", UNKNOWN),
        "propType": _get(row, "prop_type", UNKNOWN),
        "propValue": _get(row, "prop_value", 0),
        "analysis": _get(row, "analysis", ""),
        "confidence": _get(row, "confidence", 3),
    }


def format_league_stats(
    league: str,
    team_rows: Iterable[Mapping[str, Any]],
    prop_rows: Iterable[Mapping[str, Any]]
) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "teams": [format_team(league, row) for row in team_rows],
        "playerProps": [format_player_prop(row) for row in prop_rows],
    }


# --- predictions blob ---------------------------------------------------------

def _other_team(row: Mapping[str, Any]) -> str:
    home = _get(row, "home_team", "")
    away = _get(row, "away_team", "")
    value = _get(row, "value", "")
    return away if home and value.startswith(home) else home


def format_pick_text(row: Mapping[str, Any]) -> str:
    """Readable pick line, e.g. "Boston Celtics to win vs. New York Knicks"."""
    label = row.get("label")
    value = _get(row, "value", "")
    home = _get(row, "home_team", "Home")
    away = _get(row, "away_team", "Away")

    if label in TOTAL_UNITS:
        return f"{value} {TOTAL_UNITS[label]} in {away} vs. {home}"
    if label == PickLabel.FIRST_INNING:
        return f"{away} vs. {home} - {value}"
    return f"{value} vs. {_other_team(row)}"


def with_probability(text: str, confidence: Any) -> str:
    """Append the confidence: "X (65% probability)" or "X (Yes, 65% probability)"."""
    if text.endswith(")"):
        return f"{text[:-1]}, {confidence}% probability)"
    return f"{text} ({confidence}% probability)"


def _best(rows: List[Mapping[str, Any]], league: str, label: str) -> Optional[Mapping[str, Any]]:
    matching = [r for r in rows if r.get("league") == league and r.get("label") == label]
    if not matching:
        return None
    return max(matching, key=lambda r: r.get("confidence") or 0)


def _headline(rows, league: str, label: str, key: str) -> Optional[Dict[str, str]]:
    best = _best(rows, league, label)
    if best is None:
        return None
    return {
        key: with_probability(format_pick_text(best), best.get("confidence")),
        "reasoning": _get(best, "explanation", ""),
    }


def format_predictions(pick_rows: List[Mapping[str, Any]]) -> Dict[str, Any]:
    """Build the predictions blob from stored ai_picks rows.

    Headlines: best NBA moneyline, best NHL total-goals call and best MLB
    first-inning call; plus the flagged Bets of the Day.
    """
    bets = sorted(
        (r for r in pick_rows if r.get("is_bet_of_the_day")),
        key=lambda r: r.get("confidence") or 0,
        reverse=True
    )

    return {
        League.NBA: _headline(pick_rows, League.NBA, PickLabel.MONEYLINE, "gameOutcome"),
        League.NHL: _headline(pick_rows, League.NHL, PickLabel.TOTAL_GOALS, "totalGoals"),
        League.MLB: _headline(pick_rows, League.MLB, PickLabel.FIRST_INNING, "firstInning"),
        "betsOfTheDay": [
            {
                "sport": LEAGUE_LABELS.get(r.get("league"), str(r.get("league", "")).upper()),
                "pick": format_pick_text(r),
                "reasoning": _get(r, "explanation", ""),
            }
            for r in bets
        ],
    }


# --- console -----------------------------------------------------------------

def format_bets_text(bets: List[Mapping[str, Any]]) -> str:
    """Plain-text Bets of the Day (the betsOfTheDay entries of the blob)."""
    if not bets:
        return "No Bets of the Day today."

    lines = ["=" * 60, "BETS OF THE DAY", "=" * 60, ""]
    for i, bet in enumerate(bets, 1):
        lines.append(f"#{i} [{bet.get('sport')}] {bet.get('pick')}")
        if bet.get("reasoning"):
            lines.append(f"    {bet['reasoning']}")
        lines.append("")
    return "\n".join(lines)


def format_snapshot_text(snapshot: DashboardSnapshot) -> str:
    """Console summary of everything the dashboard would show."""
    if snapshot.loading:
        return "Loading..."
    if snapshot.error:
        return f"Error loading data: {snapshot.error}"

    lines = []
    for label, blob in (("NBA", snapshot.nba_stats), ("NHL", snapshot.nhl_stats), ("MLB", snapshot.mlb_stats)):
        blob = blob or {}
        lines.append(f"{label}: {len(blob.get('teams') or [])} teams, "
                     f"{len(blob.get('playerProps') or [])} player props")

    predictions = snapshot.predictions or {}
    for league, key in ((League.NBA, "gameOutcome"), (League.NHL, "totalGoals"), (League.MLB, "firstInning")):
        headline = predictions.get(league)
        if headline:
            lines.append(f"{LEAGUE_LABELS[league]} prediction: {headline[key]}")

    lines.append("")
    lines.append(format_bets_text(predictions.get("betsOfTheDay") or []))
    return "\n".join(lines)
