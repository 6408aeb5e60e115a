"""Tests for the per-league row builders."""

import pytest

from data.collectors import epl_stats, mlb_stats, nba_stats, nhl_stats
from data.collectors.http_client import ApiError


# --- NBA ------------------------------------------------------------------------

def test_nba_team_stats_from_games_with_defaults():
    teams = [
        {"id": 1, "full_name": "Boston Celtics", "abbreviation": "BOS"},
        {"id": 3, "full_name": "Charlotte Hornets", "abbreviation": "CHA"},
    ]
    games = [{
        "id": 10,
        "date": "2023-10-25",
        "status": "Final",
        "home_team": {"id": 1},
        "visitor_team": {"id": 2},
        "home_team_score": 110,
        "visitor_team_score": 100,
    }]

    rows = nba_stats.build_team_stats(teams, games)

    celtics, hornets = rows
    assert celtics.team_name == "Boston Celtics (BOS)"
    assert celtics.win_rate == 1.0
    assert celtics.offensive_rating == 110
    assert celtics.recent_form == "W"
    # No finished games: neutral defaults
    assert hornets.team_name == "Charlotte Hornets (CHA)"
    assert hornets.win_rate == 0.5
    assert hornets.pace == 100.0
    assert hornets.recent_form == "N/A"


def test_nba_team_rows_survive_games_outage(monkeypatch):
    monkeypatch.setattr(nba_stats, "get_teams", lambda: [
        {"id": 1, "full_name": "Boston Celtics", "abbreviation": "BOS"},
    ])

    def games_down():
        raise ApiError("HTTP error! status: 401", status_code=401)

    monkeypatch.setattr(nba_stats, "get_season_games", games_down)

    celtics, = nba_stats.collect_teams()

    assert celtics.team_name == "Boston Celtics (BOS)"
    assert celtics.win_rate == 0.5
    assert celtics.recent_form == "N/A"

def test_nba_player_props_from_season_averages():
    averages = [
        {
            "player": {"first_name": "Jayson", "last_name": "Tatum", "team": {"abbreviation": "BOS"}},
            "stats": {"pts": 26.9, "reb": 8.1, "ast": 4.9, "gp": 74},
        },
        {
            "player": {"first_name": "Jayson", "last_name": "Tatum", "team": {"abbreviation": "BOS"}},
            "stats": {"pts": 27.0, "reb": 8.0, "ast": 5.0, "gp": 75},
        },
        {"player": {"first_name": "No", "last_name": "Team"}, "stats": {"pts": 2}},
    ]

    props = {p.key: p for p in nba_stats.build_player_props(averages)}

    assert len(props) == 6
    points = props["Jayson Tatum-Season Avg Pts"]
    # The later duplicate wins
    assert points.prop_value == 27.0
    assert points.analysis == "Avg 27 pts in 75 games."
    assert points.confidence == 3
    assert props["No Team-Season Avg Reb"].team == "N/A"
    assert props["No Team-Season Avg Reb"].prop_value == 0.0


# --- NHL ------------------------------------------------------------------------

STANDINGS = [
    {
        "teamAbbrev": {"default": "BOS"},
        "teamName": {"default": "Boston Bruins"},
        "streakCode": "W",
        "streakCount": 3,
        "powerPlayPct": 22.5,
        "pointPctg": 0.65,
        "goalFor": 100,
        "goalAgainst": 80,
        "gamesPlayed": 40,
    },
    {
        "teamAbbrev": {"default": "SJS"},
        "teamName": {"default": "San Jose Sharks"},
        "pointPctg": 0.3,
    },
]

GOALIE_LEADERS = [
    {"firstName": {"default": "Jeremy"}, "lastName": {"default": "Swayman"}, "teamAbbrev": "BOS", "value": 0.925},
    {"firstName": {"default": "Linus"}, "lastName": {"default": "Ullmark"}, "teamAbbrev": "BOS", "value": 0.915},
]


@pytest.mark.parametrize("goalie_payload", [
    {"categories": [
        {"category": "savePctg", "categoryLabel": "Save %", "leaders": GOALIE_LEADERS},
        {"category": "goalsAgainstAverage", "leaders": [{"teamAbbrev": "BOS", "value": 2.1}]},
    ]},
    {"savePctg": GOALIE_LEADERS, "goalsAgainstAverage": [{"teamAbbrev": "BOS", "value": 2.1}]},
])
def test_nhl_team_stats_joins_first_goalie_leader(goalie_payload):
    bruins, sharks = nhl_stats.build_team_stats(STANDINGS, goalie_payload)

    assert bruins.team_name == "Boston Bruins (BOS)"
    assert bruins.puck_line_trend == "W3"
    assert bruins.goalie_name == "Jeremy Swayman"
    assert bruins.goalie_save_percentage == pytest.approx(0.925)
    assert bruins.goals_against_average == pytest.approx(2.1)
    assert bruins.power_play_efficiency == pytest.approx(0.225)
    assert bruins.goals_for_per_game == pytest.approx(2.5)
    assert bruins.goals_against_per_game == pytest.approx(2.0)

    assert sharks.goalie_name == "N/A"
    assert sharks.puck_line_trend == "N/A"
    assert sharks.goals_for_per_game is None


@pytest.mark.parametrize("value, expected", [(0, 1), (None, 1), (25, 3), (50, 5), (120, 5)])
def test_nhl_prop_confidence_is_bounded(value, expected):
    assert nhl_stats.prop_confidence(value) == expected


def test_nhl_player_props_from_skater_leaders():
    payload = {
        "goals": [
            {"firstName": {"default": "Auston"}, "lastName": {"default": "Matthews"},
             "teamAbbrev": "TOR", "value": 69, "gamesPlayed": 81},
            {"firstName": "Sam", "lastName": "Reinhart", "teamAbbrev": {"default": "FLA"}, "value": 57},
        ],
    }

    props = nhl_stats.build_player_props(payload, per_category=1)

    assert len(props) == 1
    prop = props[0]
    assert prop.player_name == "Auston Matthews"
    assert prop.team == "TOR"
    assert prop.prop_type == "Season Goals"
    assert prop.analysis == "69 goals in 81 games."
    assert prop.confidence == 5


# --- MLB ------------------------------------------------------------------------

HITTER = {
    "player": {"first_name": "Aaron", "last_name": "Judge", "team": {"abbreviation": "NYY"}},
    "batting_h": 30, "batting_ab": 100, "batting_hr": 10, "batting_rbi": 25,
}
PITCHER = {
    "player": {"first_name": "Gerrit", "last_name": "Cole", "team": {"abbreviation": "NYY"}},
    "pitching_er": 10, "pitching_ip": "30.0", "pitching_w": 0,
}


def test_mlb_player_props_skip_rules():
    props = {p.key: p for p in mlb_stats.build_player_props([HITTER, PITCHER, {"player": None}])}

    # Hitter: no ERA without innings, no zero W for a non-pitcher
    assert "Aaron Judge-ERA" not in props
    assert "Aaron Judge-W" not in props
    assert props["Aaron Judge-AVG"].prop_value == pytest.approx(0.3)
    assert props["Aaron Judge-AVG"].analysis == "Season AVG: 0.300"
    assert props["Aaron Judge-HR"].analysis == "Season HR: 10"

    # Pitcher keeps ERA and a zero W
    assert props["Gerrit Cole-ERA"].prop_value == pytest.approx(3.0)
    assert props["Gerrit Cole-W"].prop_value == 0
    assert len(props) == 8


def test_mlb_team_stats_combines_standings_and_totals():
    teams = [
        {"id": 1, "abbreviation": "NYY", "display_name": "New York Yankees"},
        {"id": 2, "abbreviation": None, "display_name": "Mystery"},
    ]
    standings = [{"team": {"abbreviation": "NYY"}, "wins": 82, "losses": 80}]

    rows = mlb_stats.build_team_stats(teams, standings, [HITTER, PITCHER])

    assert len(rows) == 1
    yankees = rows[0]
    assert yankees.team_name == "New York Yankees (NYY)"
    assert yankees.win_loss_record == "82-80"
    assert yankees.era == pytest.approx(3.0)
    assert yankees.batting_average == pytest.approx(0.3)


def test_mlb_season_stats_fetched_once_for_teams_and_props(monkeypatch):
    requested = []

    def fake_fetch(url, params=None):
        requested.append(url.rsplit("/", 1)[-1])
        if url.endswith("/teams"):
            return [{"id": 1, "abbreviation": "NYY", "display_name": "New York Yankees"}]
        if url.endswith("/standings"):
            return [{"team": {"abbreviation": "NYY"}, "wins": 82, "losses": 80}]
        return [HITTER, PITCHER]

    monkeypatch.setattr(mlb_stats, "fetch_all_paginated", fake_fetch)

    teams = mlb_stats.collect_teams()
    props = mlb_stats.collect_props()

    assert len(teams) == 1
    assert len(props) == 8
    assert requested.count("season_stats") == 1


# --- EPL ------------------------------------------------------------------------

def test_epl_rows():
    teams = [{"abbreviation": "ARS", "name": "Arsenal"}]
    standings = [{"team": {"abbreviation": "ARS"}, "wins": 20, "losses": 5, "goals_for": 60,
                  "goals_against": 25, "points": 66}]
    stats = [{"player": {"first_name": "Bukayo", "last_name": "Saka", "team": {"abbreviation": "ARS"}},
              "goals": 12, "assists": 0, "yellow_cards": 3}]

    team_rows = epl_stats.build_team_stats(teams, standings)
    props = epl_stats.build_player_props(stats)

    assert team_rows[0].team_name == "Arsenal (ARS)"
    assert team_rows[0].points == 66
    assert sorted(p.prop_type for p in props) == ["Goals", "YellowCards"]


def test_epl_collect_teams_without_teams_returns_nothing(monkeypatch):
    monkeypatch.setattr(epl_stats, "get_teams", lambda: [])

    def unexpected(*args, **kwargs):
        raise AssertionError("standings should not be fetched")

    monkeypatch.setattr(epl_stats, "get_standings", unexpected)

    assert epl_stats.collect_teams() == []
