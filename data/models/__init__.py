"""Data models for the sports stats dashboard backend."""
from .schemas import (
    NBATeamStats, NHLTeamStats, MLBTeamStats, EPLTeamStats,
    PlayerProp, Matchup, PickSuggestion, GamePrediction, RankedPick,
    SyncResult, DashboardSnapshot, TotalSide
)
