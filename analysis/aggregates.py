"""
Derived aggregates computed during ingestion.
Team records and form from game results, batting average and ERA from player
season stats, and the display-name key helpers shared by every league.
"""
import math
import re
from typing import Any, Dict, Iterable, List, Optional
import pandas as pd
import structlog

logger = structlog.get_logger()

_KEY_RE = re.compile(r"\(([^()]*)\)\s*$")


def format_team_name(name: Optional[str], abbreviation: Optional[str], default: str = "Unknown") -> str:
    """Build the upsert key for a team row: ``"<name> (<ABBR>)"``."""
    return f"{name or default} ({abbreviation or 'N/A'})"


def normalize_abbr(value: Any) -> Optional[str]:
    """Trim and upper-case an abbreviation; None when blank."""
    if not isinstance(value, str):
        return None
    value = value.strip().upper()
    return value or None


def extract_team_key(team_name: Optional[str]) -> Optional[str]:
    """Pull the abbreviation back out of a team display name.

    "Golden State Warriors (GSW)" -> "GSW". Names without a parenthesised
    suffix fall back to the upper-cased name itself.
    """
    if not team_name:
        return None
    match = _KEY_RE.search(team_name)
    if match:
        return normalize_abbr(match.group(1))
    return normalize_abbr(team_name)


def to_float(value: Any) -> Optional[float]:
    """Parse a number that may arrive as str, int, float or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def parse_innings(value: Any) -> float:
    """Convert baseball innings notation to true innings.

    "6.1" is six innings and one out (6 1/3), "6.2" is 6 2/3.
    """
    number = to_float(value)
    if number is None or number <= 0:
        return 0.0
    whole = math.floor(number)
    outs = round((number - whole) * 10)
    if outs > 2:
        # Already a decimal fraction of an inning
        return number
    return whole + outs / 3.0


def compute_era(earned_runs: float, innings_pitched: float) -> Optional[float]:
    if innings_pitched > 0:
        return earned_runs * 9 / innings_pitched
    return None


def compute_batting_average(hits: float, at_bats: float) -> Optional[float]:
    if at_bats > 0:
        return hits / at_bats
    return None


def form_string(results: Iterable[str]) -> str:
    """Join W/L results (most recent last) as "W-L-W"."""
    results = list(results)
    return "-".join(results) if results else "N/A"


def form_win_pct(form: Optional[str], default: float = 0.5) -> float:
    """Share of wins in a form string such as "W-L-W-W-L"."""
    if not form:
        return default
    results = [r for r in re.split(r"[^A-Za-z]+", form.upper()) if r in ("W", "L")]
    if not results:
        return default
    return results.count("W") / len(results)


def parse_record(record: Optional[str], default: float = 0.5) -> float:
    """Win percentage from a "W-L" record string."""
    if not record:
        return default
    parts = record.split("-")
    if len(parts) < 2:
        return default
    wins = to_float(parts[0])
    losses = to_float(parts[1])
    if wins is None or losses is None or wins + losses <= 0:
        return default
    return wins / (wins + losses)


def nba_team_records(games: List[dict], recent_games: int = 5) -> Dict[int, Dict[str, Any]]:
    """Aggregate per-team results from finished BallDontLie NBA games.

    Args:
        games: Game payloads with home/visitor teams and scores
        recent_games: How many results make up the form string

    Returns:
        Dict of team id -> win_rate, offensive_rating (points scored per
        game), defensive_rating (points allowed per game), pace (combined
        points per game / 2) and recent_form
    """
    per_team: Dict[int, List[Dict[str, Any]]] = {}

    for game in games:
        if str(game.get("status", "")).lower() != "final":
            continue
        home_id = (game.get("home_team") or {}).get("id")
        away_id = (game.get("visitor_team") or {}).get("id")
        home_score = to_float(game.get("home_team_score"))
        away_score = to_float(game.get("visitor_team_score"))
        if home_id is None or away_id is None or home_score is None or away_score is None:
            continue
        if home_score == 0 and away_score == 0:
            continue

        game_date = str(game.get("date") or "")
        per_team.setdefault(home_id, []).append(
            {"date": game_date, "scored": home_score, "allowed": away_score})
        per_team.setdefault(away_id, []).append(
            {"date": game_date, "scored": away_score, "allowed": home_score})

    records = {}
    for team_id, results in per_team.items():
        results.sort(key=lambda r: r["date"])
        n = len(results)
        wins = sum(1 for r in results if r["scored"] > r["allowed"])
        scored = sum(r["scored"] for r in results) / n
        allowed = sum(r["allowed"] for r in results) / n
        recent = results[-recent_games:]
        records[team_id] = {
            "win_rate": wins / n,
            "offensive_rating": scored,
            "defensive_rating": allowed,
            "pace": (scored + allowed) / 2,
            "recent_form": form_string("W" if r["scored"] > r["allowed"] else "L" for r in recent),
            "games": n,
        }

    logger.debug("nba_team_records_built", teams=len(records))
    return records


def aggregate_mlb_team_stats(player_stats: List[dict]) -> Dict[str, Dict[str, Optional[float]]]:
    """Sum batting and pitching totals per team abbreviation.

    Args:
        player_stats: BallDontLie MLB season_stats payloads

    Returns:
        Dict of abbreviation -> totals plus derived batting_average and era
    """
    rows = []
    for stats in player_stats:
        abbr = normalize_abbr(((stats.get("player") or {}).get("team") or {}).get("abbreviation"))
        if not abbr:
            continue
        rows.append({
            "abbreviation": abbr,
            "hits": to_float(stats.get("batting_h")) or 0.0,
            "at_bats": to_float(stats.get("batting_ab")) or 0.0,
            "earned_runs": to_float(stats.get("pitching_er")) or 0.0,
            "innings_pitched": parse_innings(stats.get("pitching_ip")),
        })

    if not rows:
        return {}

    totals = pd.DataFrame(rows).groupby("abbreviation").sum()

    aggregated = {}
    for abbr, row in totals.iterrows():
        hits = float(row["hits"])
        at_bats = float(row["at_bats"])
        earned_runs = float(row["earned_runs"])
        innings = float(row["innings_pitched"])
        aggregated[abbr] = {
            "total_hits": hits,
            "total_at_bats": at_bats,
            "total_earned_runs": earned_runs,
            "total_innings_pitched": innings,
            "batting_average": compute_batting_average(hits, at_bats),
            "era": compute_era(earned_runs, innings),
        }

    logger.info("mlb_team_stats_aggregated", teams=len(aggregated))
    return aggregated


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
