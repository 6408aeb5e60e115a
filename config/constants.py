"""
Constants and mappings for the sports stats dashboard backend.
"""
from typing import Dict, List


class League:
    NBA = "nba"
    NHL = "nhl"
    MLB = "mlb"
    EPL = "epl"


ALL_LEAGUES: List[str] = [League.NBA, League.NHL, League.MLB, League.EPL]

# Leagues the pick generator has a model for
PICK_LEAGUES: List[str] = [League.NBA, League.NHL, League.MLB]

# Display labels used by the dashboard ("sport" field of a bet)
LEAGUE_LABELS: Dict[str, str] = {
    League.NBA: "NBA",
    League.NHL: "NHL",
    League.MLB: "MLB",
    League.EPL: "EPL",
}

# BallDontLie path prefixes per league
BALLDONTLIE_PREFIXES: Dict[str, str] = {
    League.NBA: "/v1",
    League.MLB: "/mlb/v1",
    League.EPL: "/epl/v1",
}

# Supabase tables
TEAM_STATS_TABLES: Dict[str, str] = {
    League.NBA: "nba_team_stats",
    League.NHL: "nhl_team_stats",
    League.MLB: "mlb_team_stats",
    League.EPL: "epl_team_stats",
}

PLAYER_PROPS_TABLES: Dict[str, str] = {
    League.NBA: "nba_player_props",
    League.NHL: "nhl_player_props",
    League.MLB: "mlb_player_props",
    League.EPL: "epl_player_props",
}

PICKS_TABLE = "ai_picks"

# Upsert conflict targets
TEAM_CONFLICT_KEY = "team_name"
PROP_CONFLICT_KEY = "player_name,prop_type"

# Row fallbacks
UNKNOWN = "N/A"
UNKNOWN_TEAM = "Unknown Team"
DEFAULT_PROP_CONFIDENCE = 3
MAX_PROP_CONFIDENCE = 5

# NBA team defaults when no games are available for a team
NBA_TEAM_DEFAULTS = {
    "win_rate": 0.5,
    "pace": 100.0,
    "offensive_rating": 110.0,
    "defensive_rating": 110.0,
    "recent_form": UNKNOWN,
}

# NBA season-average props: prop label -> (stat key, analysis noun)
NBA_AVERAGE_PROPS = {
    "Season Avg Pts": ("pts", "pts"),
    "Season Avg Reb": ("reb", "reb"),
    "Season Avg Ast": ("ast", "ast"),
}

# MLB player prop types
MLB_PROP_TYPES = ["AVG", "HR", "RBI", "ERA", "W"]

# EPL player props: prop type -> season stat field
EPL_PROP_FIELDS = {
    "Goals": "goals",
    "Assists": "assists",
    "YellowCards": "yellow_cards",
}

# EPL /teams parameter fallbacks, tried in order
EPL_TEAM_PARAM_VARIANTS = [
    ("No Params", {}),
    ("Season 2023", {"season": 2023}),
    ("Season 2024", {"season": 2024}),
]

# NHL leader categories used for team rows
NHL_SAVE_PCT_CATEGORIES = ("savePct", "savePctg")
NHL_GAA_CATEGORIES = ("goalsAgainstAverage", "gaa")


class PickLabel:
    MONEYLINE = "Moneyline"
    SPREAD = "Spread"
    TOTAL = "Total"
    PUCK_LINE = "Puck Line"
    TOTAL_GOALS = "Total Goals"
    FIRST_INNING = "First Inning"
    TOTAL_RUNS = "Total Runs"


# Placeholder betting lines (no odds feed is wired in)
NBA_TOTAL_LINE = 224.5
NHL_TOTAL_LINE = 6.5
NHL_PUCK_LINE = 1.5
MLB_TOTAL_LINE = 8.5

# Hand-tuned pick weights
NBA_WEIGHTS = {"win_rate": 0.45, "form": 0.25, "net_rating": 0.30}
NBA_HOME_EDGE = 0.03
NBA_POINTS_PER_POWER = 40.0  # converts a power gap into a spread

NHL_WEIGHTS = {"point_pct": 0.40, "goal_diff": 0.25, "save_pct": 0.20, "power_play": 0.15}
NHL_HOME_EDGE = 0.02

MLB_WEIGHTS = {"win_pct": 0.50, "era": 0.30, "batting_average": 0.20}
MLB_HOME_EDGE = 0.02

# League-neutral values used when a stat row is missing a field
NBA_NEUTRAL = {"win_rate": 0.5, "pace": 100.0, "offensive_rating": 112.0, "defensive_rating": 112.0}
NHL_NEUTRAL = {
    "point_pct": 0.5,
    "goals_for_per_game": 3.0,
    "goals_against_per_game": 3.0,
    "goalie_save_percentage": 0.905,
    "power_play_efficiency": 0.20,
}
MLB_NEUTRAL = {"win_pct": 0.5, "era": 4.20, "batting_average": 0.248}

# Confidence bounds (integer percentages)
MONEYLINE_CONFIDENCE_RANGE = (50, 90)
LINE_CONFIDENCE_RANGE = (50, 85)
