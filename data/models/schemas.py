"""
Data models/schemas for the sports stats dashboard backend.
Uses dataclasses for clean, typed data structures.
"""
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from enum import Enum


class TotalSide(Enum):
    """Side of a totals pick."""
    OVER = "Over"
    UNDER = "Under"


@dataclass
class NBATeamStats:
    """One row of nba_team_stats."""
    team_name: str
    win_rate: float = 0.5
    pace: float = 100.0
    offensive_rating: float = 110.0
    defensive_rating: float = 110.0
    recent_form: str = "N/A"

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NHLTeamStats:
    """One row of nhl_team_stats."""
    team_name: str
    puck_line_trend: str = "N/A"
    goalie_name: str = "N/A"
    goalie_save_percentage: Optional[float] = None
    goals_against_average: Optional[float] = None
    power_play_efficiency: Optional[float] = None
    point_pct: Optional[float] = None
    goals_for_per_game: Optional[float] = None
    goals_against_per_game: Optional[float] = None

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MLBTeamStats:
    """One row of mlb_team_stats."""
    team_name: str
    win_loss_record: str = "0-0"
    era: Optional[float] = None
    batting_average: Optional[float] = None

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EPLTeamStats:
    """One row of epl_team_stats."""
    team_name: str
    wins: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PlayerProp:
    """A display-only player prop row."""
    player_name: str
    team: str
    prop_type: str
    prop_value: Optional[float]
    analysis: str
    confidence: int = 3

    @property
    def key(self) -> str:
        """In-memory de-duplication key, mirrors the upsert conflict target."""
        return f"{self.player_name}-{self.prop_type}"

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Matchup:
    """A game on today's slate."""
    league: str
    home_abbr: str
    away_abbr: str
    game_date: date
    game_id: Optional[str] = None
    home_name: Optional[str] = None
    away_name: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.away_abbr} @ {self.home_abbr}"


@dataclass
class PickSuggestion:
    """One label/value/confidence entry produced by the pick generator."""
    label: str
    value: str
    confidence: int  # integer percentage


@dataclass
class GamePrediction:
    """All suggestions for a single matchup."""
    league: str
    matchup: Matchup
    home_team: str
    away_team: str
    picks: List[PickSuggestion] = field(default_factory=list)
    explanation: str = ""

    # Projection context kept for templating
    projections: Dict[str, float] = field(default_factory=dict)

    generated_at: datetime = field(default_factory=datetime.now)

    def pick_for(self, label: str) -> Optional[PickSuggestion]:
        for pick in self.picks:
            if pick.label == label:
                return pick
        return None


@dataclass
class RankedPick:
    """A suggestion selected for Bets of the Day."""
    prediction: GamePrediction
    suggestion: PickSuggestion
    rank: int = 0


@dataclass
class SyncResult:
    """Outcome of one league's ingestion run."""
    league: str
    teams_upserted: int = 0
    props_upserted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DashboardSnapshot:
    """The four blobs the dashboard renders, plus load state."""
    nba_stats: Optional[Dict[str, Any]] = None
    nhl_stats: Optional[Dict[str, Any]] = None
    mlb_stats: Optional[Dict[str, Any]] = None
    predictions: Optional[Dict[str, Any]] = None
    loading: bool = False
    error: Optional[str] = None
    loaded_at: Optional[datetime] = None
