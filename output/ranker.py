"""
Confidence ranking for AI picks.
Scores, diversifies and selects the Bets of the Day.
"""
from typing import List, Optional
import structlog

from config.settings import get_settings
from data.models.schemas import GamePrediction, RankedPick

logger = structlog.get_logger()
settings = get_settings()


def rank_picks(predictions: List[GamePrediction]) -> List[RankedPick]:
    """Flatten every suggestion and sort by confidence (highest first).

    Ties keep the order the suggestions were generated in.

    Args:
        predictions: Predictions for all leagues

    Returns:
        Sorted list of RankedPick objects
    """
    candidates = [
        RankedPick(prediction=prediction, suggestion=suggestion)
        for prediction in predictions
        for suggestion in prediction.picks
    ]
    candidates.sort(key=lambda c: c.suggestion.confidence, reverse=True)

    logger.info(
        "ranked_picks",
        total=len(candidates),
        top_confidence=candidates[0].suggestion.confidence if candidates else 0
    )
    return candidates


def diversify_picks(
    ranked: List[RankedPick],
    max_per_game: int = 1,
    max_per_league: Optional[int] = None
) -> List[RankedPick]:
    """Ensure diversity in picks (not all from the same game or league).

    Args:
        ranked: Ranked list (already sorted by confidence)
        max_per_game: Max picks from the same game
        max_per_league: Max picks from the same league

    Returns:
        Diversified list
    """
    if max_per_league is None:
        max_per_league = settings.max_bets_per_league

    selected = []
    game_counts = {}
    league_counts = {}

    for candidate in ranked:
        league = candidate.prediction.league
        game = (league, candidate.prediction.matchup.label)

        if game_counts.get(game, 0) >= max_per_game:
            continue
        if league_counts.get(league, 0) >= max_per_league:
            continue

        selected.append(candidate)
        game_counts[game] = game_counts.get(game, 0) + 1
        league_counts[league] = league_counts.get(league, 0) + 1

    return selected


def select_top_picks(
    ranked: List[RankedPick],
    max_picks: Optional[int] = None,
    min_confidence: Optional[int] = None
) -> List[RankedPick]:
    """Select the top picks and number them 1..N.

    Args:
        ranked: Ranked (and usually diversified) list
        max_picks: Maximum number to select
        min_confidence: Minimum confidence to recommend

    Returns:
        Top picks (may be fewer than max if not enough quality)
    """
    if max_picks is None:
        max_picks = settings.max_bets_of_the_day
    if min_confidence is None:
        min_confidence = settings.min_bet_confidence

    quality = [c for c in ranked if c.suggestion.confidence >= min_confidence]
    top = quality[:max_picks]
    for i, candidate in enumerate(top):
        candidate.rank = i + 1

    logger.info("selected_top_picks", total_quality=len(quality), selected=len(top))
    return top


def select_bets_of_the_day(predictions: List[GamePrediction]) -> List[RankedPick]:
    """Rank, diversify and cut down to the Bets of the Day."""
    return select_top_picks(diversify_picks(rank_picks(predictions)))
