"""
Explanation templates for AI picks.
One template per league; the builder fills them from the two team rows.
"""

NBA_EXPLANATION_TEMPLATE = (
    "{favourite} grade out stronger: {fav_win_rate} win rate and {fav_form} recent form "
    "against {underdog}'s {dog_win_rate} and {dog_form}. "
    "Net scoring margin {fav_net} vs {dog_net} points per game. "
    "Projected total of {projected_total:.1f} points against a {total_line:g} line favours the {total_side}."
)

NHL_EXPLANATION_TEMPLATE = (
    "{favourite} hold the edge on points percentage ({fav_point_pct} vs {dog_point_pct}). "
    "In goal: {home_goalie} ({home_save_pct}) for {home_team}, {away_goalie} ({away_save_pct}) for {away_team}. "
    "Projected {projected_total:.1f} goals against a {total_line:g} line favours the {total_side}."
)

MLB_EXPLANATION_TEMPLATE = (
    "{favourite} ({fav_record}, {fav_era} ERA, {fav_avg} AVG) rate ahead of "
    "{underdog} ({dog_record}, {dog_era} ERA, {dog_avg} AVG). "
    "First-inning run chance {first_inning:.0%}. "
    "Projected {projected_total:.1f} runs against a {total_line:g} line favours the {total_side}."
)

FALLBACK_EXPLANATION = "{favourite} rate as the stronger side against {underdog} on season numbers."
