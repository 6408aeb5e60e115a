"""Tests for the AI pick generator."""

from datetime import date

import pytest

from analysis import pick_engine
from config.constants import PickLabel
from data.models.schemas import Matchup
from generation.narrative_builder import display_name


def _nhl_matchup():
    return Matchup(league="nhl", home_abbr="BOS", away_abbr="TOR", game_date=date(2024, 1, 15))


def _mlb_matchup():
    return Matchup(league="mlb", home_abbr="NYY", away_abbr="BOS", game_date=date(2024, 6, 1))


def test_nba_picks_favour_stronger_home_team(nba_rows, nba_matchup):
    home, away = nba_rows

    prediction = pick_engine.generate_game_picks("nba", nba_matchup, home, away)

    assert [p.label for p in prediction.picks] == [PickLabel.MONEYLINE, PickLabel.SPREAD, PickLabel.TOTAL]
    moneyline = prediction.pick_for(PickLabel.MONEYLINE)
    assert moneyline.value == "Boston Celtics to win"
    assert 50 <= moneyline.confidence <= 90
    assert prediction.pick_for(PickLabel.SPREAD).value.startswith("Boston Celtics -")
    # (120 + 118) / 2 + (108 + 108) / 2 = 227
    assert prediction.projections["projected_total"] == pytest.approx(227.0)
    assert prediction.pick_for(PickLabel.TOTAL).value == "Over 224.5"
    assert "Boston Celtics" in prediction.explanation
    assert "Detroit Pistons" in prediction.explanation


def test_nba_picks_with_empty_rows_use_neutral_values(nba_matchup):
    prediction = pick_engine.generate_game_picks("nba", nba_matchup, {}, {})

    # Home edge alone decides the side
    assert prediction.home_team == "BOS"
    assert prediction.pick_for(PickLabel.MONEYLINE).value == "BOS to win"
    assert prediction.pick_for(PickLabel.SPREAD).value == "BOS -1.5"
    assert prediction.pick_for(PickLabel.TOTAL).value == "Under 224.5"


def test_confidence_stays_in_bounds(nba_matchup):
    juggernaut = {"team_name": "A (BOS)", "win_rate": 1.0, "offensive_rating": 150,
                  "defensive_rating": 90, "recent_form": "W-W-W-W-W"}
    doormat = {"team_name": "B (DET)", "win_rate": 0.0, "offensive_rating": 80,
               "defensive_rating": 140, "recent_form": "L-L-L-L-L"}

    prediction = pick_engine.generate_game_picks("nba", nba_matchup, juggernaut, doormat)

    assert prediction.pick_for(PickLabel.MONEYLINE).confidence == 90
    assert prediction.pick_for(PickLabel.SPREAD).confidence == 85
    assert all(50 <= p.confidence <= 90 for p in prediction.picks)


def test_nhl_close_game_takes_underdog_puck_line():
    prediction = pick_engine.generate_game_picks("nhl", _nhl_matchup(), {}, {})

    assert [p.label for p in prediction.picks] == [PickLabel.MONEYLINE, PickLabel.PUCK_LINE, PickLabel.TOTAL_GOALS]
    assert prediction.pick_for(PickLabel.PUCK_LINE).value == "TOR +1.5"
    assert prediction.projections["projected_total"] == pytest.approx(6.0)
    assert prediction.pick_for(PickLabel.TOTAL_GOALS).value == "Under 6.5"


def test_nhl_mismatch_takes_favourite_puck_line():
    strong = {"team_name": "Boston Bruins (BOS)", "point_pct": 0.8, "goals_for_per_game": 4.0,
              "goals_against_per_game": 2.0, "goalie_save_percentage": 0.930, "power_play_efficiency": 0.28}
    weak = {"team_name": "San Jose Sharks (SJS)", "point_pct": 0.25, "goals_for_per_game": 2.2,
            "goals_against_per_game": 4.0, "goalie_save_percentage": 0.880, "power_play_efficiency": 0.12}

    prediction = pick_engine.generate_game_picks("nhl", _nhl_matchup(), strong, weak)

    assert prediction.pick_for(PickLabel.PUCK_LINE).value == "Boston Bruins -1.5"
    assert prediction.pick_for(PickLabel.MONEYLINE).value == "Boston Bruins to win"


def test_mlb_neutral_rows():
    prediction = pick_engine.generate_game_picks("mlb", _mlb_matchup(), {}, {})

    first_inning = prediction.pick_for(PickLabel.FIRST_INNING)
    assert first_inning.value == "First inning run (Yes)"
    assert first_inning.confidence == 50
    assert prediction.projections["projected_total"] == pytest.approx(8.4)
    assert prediction.pick_for(PickLabel.TOTAL_RUNS).value == "Under 8.5"


def test_mlb_weak_pitching_raises_first_inning_chance():
    home = {"team_name": "New York Yankees (NYY)", "win_loss_record": "60-102", "era": 5.8,
            "batting_average": 0.270}
    away = {"team_name": "Boston Red Sox (BOS)", "win_loss_record": "78-84", "era": 5.2,
            "batting_average": 0.265}

    probability = pick_engine.mlb_first_inning_probability(home, away)

    assert probability > 0.5
    prediction = pick_engine.generate_game_picks("mlb", _mlb_matchup(), home, away)
    assert prediction.pick_for(PickLabel.TOTAL_RUNS).value == "Over 8.5"
    assert prediction.pick_for(PickLabel.MONEYLINE).value == "Boston Red Sox to win"


def test_unknown_league_is_rejected(nba_matchup):
    with pytest.raises(ValueError):
        pick_engine.generate_game_picks("epl", nba_matchup, {}, {})


def test_generate_predictions_matches_rows_by_abbreviation(nba_rows, nba_matchup, game_date):
    unmatched = Matchup(league="nba", home_abbr="LAL", away_abbr="DET", game_date=game_date)

    predictions = pick_engine.generate_predictions("nba", [nba_matchup, unmatched], nba_rows)

    assert len(predictions) == 1
    assert predictions[0].home_team == "Boston Celtics"
    assert predictions[0].away_team == "Detroit Pistons"


def test_display_name_strips_key_suffix():
    assert display_name("Boston Celtics (BOS)") == "Boston Celtics"
    assert display_name("Unknown Team (N/A)", "BOS") == "BOS"
    assert display_name(None, "DET") == "DET"
