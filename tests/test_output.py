"""Tests for ranking and output formatting."""

from datetime import date

import pytest

from config.constants import PickLabel
from data.models.schemas import DashboardSnapshot, GamePrediction, Matchup, PickSuggestion
from output import formatter, ranker


def _prediction(league, home, away, *confidences, labels=None):
    labels = labels or [PickLabel.MONEYLINE, PickLabel.SPREAD, PickLabel.TOTAL]
    matchup = Matchup(league=league, home_abbr=home[:3].upper(), away_abbr=away[:3].upper(),
                      game_date=date(2024, 1, 15))
    picks = [
        PickSuggestion(label=label, value=f"{home} to win" if label == PickLabel.MONEYLINE else "Over 1.5",
                       confidence=confidence)
        for label, confidence in zip(labels, confidences)
    ]
    return GamePrediction(league=league, matchup=matchup, home_team=home, away_team=away,
                          picks=picks, explanation=f"{home} look stronger.")


@pytest.fixture
def slate():
    return [
        _prediction("nba", "Boston", "Detroit", 80, 65, 52),
        _prediction("nba", "Denver", "Utah", 75, 60, 51),
        _prediction("nba", "Milwaukee", "Orlando", 70, 58, 50),
        _prediction("nhl", "Rangers", "Kraken", 60, 55, 50,
                    labels=[PickLabel.MONEYLINE, PickLabel.PUCK_LINE, PickLabel.TOTAL_GOALS]),
        _prediction("mlb", "Yankees", "RedSox", 54, 52, 50,
                    labels=[PickLabel.MONEYLINE, PickLabel.FIRST_INNING, PickLabel.TOTAL_RUNS]),
    ]


# --- ranker ---------------------------------------------------------------------

def test_rank_picks_sorts_by_confidence_and_keeps_tie_order():
    first = _prediction("nba", "Boston", "Detroit", 60, 70)
    second = _prediction("nhl", "Rangers", "Kraken", 70)

    ranked = ranker.rank_picks([first, second])

    assert [r.suggestion.confidence for r in ranked] == [70, 70, 60]
    assert ranked[0].prediction is first
    assert ranked[1].prediction is second


def test_bets_of_the_day_are_diversified_and_filtered(slate):
    bets = ranker.select_bets_of_the_day(slate)

    assert [(b.prediction.home_team, b.suggestion.confidence) for b in bets] == [
        ("Boston", 80),
        ("Denver", 75),
        ("Rangers", 60),
    ]
    assert [b.rank for b in bets] == [1, 2, 3]


def test_select_top_picks_respects_max():
    ranked = ranker.rank_picks([_prediction("nba", "A", "B", 90, 85, 80)])

    top = ranker.select_top_picks(ranked, max_picks=2, min_confidence=50)

    assert [t.suggestion.confidence for t in top] == [90, 85]


# --- ai_picks rows ----------------------------------------------------------------

def test_build_pick_rows_flags_bets(slate):
    bets = ranker.select_bets_of_the_day(slate)

    rows = formatter.build_pick_rows(slate, bets, date(2024, 1, 15))

    assert len(rows) == 15
    flagged = [r for r in rows if r["is_bet_of_the_day"]]
    assert len(flagged) == 3
    assert {r["pick_date"] for r in rows} == {"2024-01-15"}
    assert rows[0]["matchup"] == "DET @ BOS"
    assert rows[0]["explanation"] == "Boston look stronger."


# --- pick text --------------------------------------------------------------------

def test_format_pick_text_variants():
    base = {"home_team": "Boston Celtics", "away_team": "Detroit Pistons"}

    assert formatter.format_pick_text({**base, "label": PickLabel.TOTAL, "value": "Over 224.5"}) == \
        "Over 224.5 points in Detroit Pistons vs. Boston Celtics"
    assert formatter.format_pick_text({**base, "label": PickLabel.MONEYLINE, "value": "Boston Celtics to win"}) == \
        "Boston Celtics to win vs. Detroit Pistons"
    assert formatter.format_pick_text({**base, "label": PickLabel.MONEYLINE, "value": "Detroit Pistons to win"}) == \
        "Detroit Pistons to win vs. Boston Celtics"
    assert formatter.format_pick_text({"home_team": "Yankees", "away_team": "Red Sox",
                                       "label": PickLabel.FIRST_INNING,
                                       "value": "First inning run (Yes)"}) == \
        "Red Sox vs. Yankees - First inning run (Yes)"


def test_with_probability():
    assert formatter.with_probability("Boston to win vs. Detroit", 65) == "Boston to win vs. Detroit (65% probability)"
    assert formatter.with_probability("A vs. B - First inning run (Yes)", 60) == \
        "A vs. B - First inning run (Yes, 60% probability)"


# --- dashboard blobs --------------------------------------------------------------

def test_format_predictions_headlines_and_bets():
    rows = [
        {"league": "nba", "label": PickLabel.MONEYLINE, "value": "Boston to win", "home_team": "Boston",
         "away_team": "Detroit", "confidence": 70, "explanation": "Strong home form.", "is_bet_of_the_day": True},
        {"league": "nba", "label": PickLabel.MONEYLINE, "value": "Denver to win", "home_team": "Denver",
         "away_team": "Utah", "confidence": 80, "explanation": "Best record.", "is_bet_of_the_day": True},
        {"league": "mlb", "label": PickLabel.FIRST_INNING, "value": "First inning run (No)",
         "home_team": "Yankees", "away_team": "Red Sox", "confidence": 58, "explanation": "Aces on the mound.",
         "is_bet_of_the_day": False},
    ]

    blob = formatter.format_predictions(rows)

    assert blob["nba"] == {"gameOutcome": "Denver to win vs. Utah (80% probability)", "reasoning": "Best record."}
    assert blob["nhl"] is None
    assert blob["mlb"]["firstInning"] == "Red Sox vs. Yankees - First inning run (No, 58% probability)"
    assert [b["pick"] for b in blob["betsOfTheDay"]] == ["Denver to win vs. Utah", "Boston to win vs. Detroit"]
    assert blob["betsOfTheDay"][0]["sport"] == "NBA"


def test_format_team_fills_missing_fields():
    nhl = formatter.format_team("nhl", {})
    assert nhl["teamName"] == "Unknown Team"
    assert nhl["goalieStats"] == {"name": "N/A", "savePct": None, "goalsAgainstAvg": None}

    nba = formatter.format_team("nba", {"team_name": "Boston Celtics (BOS)", "win_rate": 0.7})
    assert nba["winRate"] == 0.7
    assert nba["recentForm"] == "N/A"

    mlb = formatter.format_team("mlb", {"team_name": "Yankees (NYY)"})
    assert mlb["winLossRecord"] == "0-0"


def test_format_league_stats_shape():
    blob = formatter.format_league_stats("nba", [{"team_name": "A (A)"}], [{"player_name": "P", "prop_value": 20}])

    assert blob["teams"][0]["teamName"] == "A (A)"
    assert blob["playerProps"][0] == {
        "playerName": "P", "team": "N/A", "propType": "N/A", "propValue": 20, "analysis": "", "confidence": 3,
    }


def test_text_views():
    assert formatter.format_bets_text([]) == "No Bets of the Day today."
    assert formatter.format_snapshot_text(DashboardSnapshot(loading=True)) == "Loading..."
    assert "Error fetching data" in formatter.format_snapshot_text(DashboardSnapshot(error="Error fetching data"))

    snapshot = DashboardSnapshot(
        nba_stats={"teams": [{}, {}], "playerProps": [{}]},
        predictions={"nba": {"gameOutcome": "Boston to win vs. Detroit (70% probability)"},
                     "betsOfTheDay": [{"sport": "NBA", "pick": "Boston to win vs. Detroit", "reasoning": "Form."}]},
    )
    text = formatter.format_snapshot_text(snapshot)
    assert "NBA: 2 teams, 1 player props" in text
    assert "#1 [NBA] Boston to win vs. Detroit" in text
