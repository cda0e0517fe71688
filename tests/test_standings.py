import itertools
import random

import pytest

from clubdesk import models, standings
from clubdesk.errors import ValidationError


def match(match_id, home, away, score_home, score_away, category="U15", home_id=None, away_id=None):
    return models.MatchRecord(
        id=match_id,
        category=category,
        home_team=home,
        away_team=away,
        score_home=score_home,
        score_away=score_away,
        home_team_id=home_id,
        away_team_id=away_id,
    )


def rows_by_name(table):
    return {row.name: row for row in table.rows}


def test_two_match_season_for_the_club():
    matches = [
        match(1, "ClubA", "OpponentX", 2, 1),
        match(2, "ClubA", "OpponentY", 0, 0),
    ]

    table = standings.compute_standings("U15", "ClubA", matches)

    assert [row.name for row in table.rows] == ["ClubA", "OpponentY", "OpponentX"]
    club = rows_by_name(table)["ClubA"]
    assert (club.played, club.wins, club.draws, club.losses) == (2, 1, 1, 0)
    assert (club.goals_for, club.goals_against, club.points) == (2, 1, 4)
    opponent_x = rows_by_name(table)["OpponentX"]
    assert (opponent_x.played, opponent_x.losses, opponent_x.points) == (1, 1, 0)
    opponent_y = rows_by_name(table)["OpponentY"]
    assert (opponent_y.played, opponent_y.draws, opponent_y.points) == (1, 1, 1)


@pytest.mark.parametrize("score_home, score_away", [(3, 0), (0, 2), (1, 4), (5, 4)])
def test_winner_gets_three_points_loser_none(score_home, score_away):
    table = standings.compute_standings("U15", "ClubA", [match(1, "ClubA", "Rival", score_home, score_away)])

    rows = rows_by_name(table)
    winner, loser = ("ClubA", "Rival") if score_home > score_away else ("Rival", "ClubA")
    assert rows[winner].points == 3
    assert rows[loser].points == 0


@pytest.mark.parametrize("score", [0, 1, 3])
def test_draw_gives_one_point_each(score):
    table = standings.compute_standings("U15", "ClubA", [match(1, "Rival", "ClubA", score, score)])

    assert [row.points for row in table.rows] == [1, 1]


def test_goals_for_and_against_balance():
    rng = random.Random(7)
    teams = ["ClubA", "Raja", "Wydad", "FUS", "MAS"]
    matches = [
        match(index, home, away, rng.randint(0, 5), rng.randint(0, 5))
        for index, (home, away) in enumerate(itertools.permutations(teams, 2))
    ]

    table = standings.compute_standings("U15", "ClubA", matches)

    assert sum(row.goals_for for row in table.rows) == sum(row.goals_against for row in table.rows)
    assert sum(row.played for row in table.rows) == 2 * len(matches)


def test_distinct_points_sort_descending_whatever_the_input_order():
    matches = [
        match(1, "ClubA", "Raja", 3, 0),
        match(2, "ClubA", "Wydad", 2, 0),
        match(3, "Raja", "Wydad", 1, 1),
        match(4, "Raja", "FUS", 2, 0),
    ]
    expected = None
    for permutation in itertools.permutations(matches):
        table = standings.compute_standings("U15", "ClubA", permutation)
        points = [row.points for row in table.rows]
        assert points == sorted(points, reverse=True)
        names = [row.name for row in table.rows]
        expected = expected or names
        assert names == expected


def test_tiebreak_goal_difference_then_goals_for_then_name():
    matches = [
        match(1, "ClubA", "Zeta", 3, 0),
        match(2, "Alpha", "Beta", 4, 1),
        match(3, "Gamma", "Delta", 1, 0),
    ]

    table = standings.compute_standings("U15", "ClubA", matches)

    assert [row.name for row in table.rows] == ["Alpha", "ClubA", "Gamma", "Delta", "Beta", "Zeta"]


def test_full_tie_is_broken_by_name():
    matches = [match(1, "Zeta", "Alpha", 1, 1)]

    table = standings.compute_standings("U15", "ClubA", matches)

    assert [row.name for row in table.rows] == ["Alpha", "Zeta", "ClubA"]


def test_club_is_listed_before_its_first_match():
    table = standings.compute_standings("U15", "ClubA", [], club_logo_url="https://example.org/logo.png")

    assert len(table.rows) == 1
    assert table.rows[0].team_id == "club"
    assert table.rows[0].played == 0
    assert table.rows[0].logo_url == "https://example.org/logo.png"


def test_unscored_and_other_category_matches_are_skipped():
    matches = [
        match(1, "ClubA", "Raja", None, None),
        match(2, "ClubA", "Raja", 2, 0, category="U17"),
        match(3, "ClubA", "Raja", 1, None),
    ]

    table = standings.compute_standings("U15", "ClubA", matches)

    assert [row.name for row in table.rows] == ["ClubA"]
    assert [item.reason for item in table.skipped] == ["unscored", "other_category", "unscored"]


def test_boolean_scores_are_not_scores():
    assert not standings.is_scored(match(1, "ClubA", "Raja", True, 0))


def test_same_team_on_both_sides_is_skipped():
    table = standings.compute_standings("U15", "ClubA", [match(1, "Raja", "Raja", 1, 0)])

    assert table.skipped[0].reason == "same_team"
    assert [row.name for row in table.rows] == ["ClubA"]


def test_missing_team_is_skipped():
    table = standings.compute_standings("U15", "ClubA", [match(1, "ClubA", "  ", 1, 0)])

    assert table.skipped[0].reason == "missing_team"


def test_stable_ids_survive_a_rename():
    matches = [
        match(1, "ClubA", "Raja", 1, 0, home_id="club", away_id="opponent-1"),
        match(2, "Raja Club", "ClubA", 2, 2, home_id="opponent-1", away_id="club"),
    ]

    table = standings.compute_standings(
        "U15", "ClubA", matches, opponents={"opponent-1": "https://example.org/raja.png"}
    )

    assert len(table.rows) == 2
    raja = next(row for row in table.rows if row.team_id == "opponent-1")
    assert raja.played == 2
    assert raja.points == 1
    assert raja.logo_url == "https://example.org/raja.png"


def test_feminine_club_name_counts_as_the_club():
    table = standings.compute_standings("U15 F", "ClubA", [match(1, "ClubA (F)", "Raja", 2, 0, category="U15 F")])

    assert [row.team_id for row in table.rows] == ["club", "Raja"]
    assert table.rows[0].points == 3


@pytest.mark.parametrize(
    "club_score, opponent_score, expected",
    [
        (2, 1, standings.RESULT_WIN),
        (0, 3, standings.RESULT_LOSS),
        (1, 1, standings.RESULT_DRAW),
        (None, 1, standings.RESULT_PENDING),
    ],
)
def test_match_result(club_score, opponent_score, expected):
    assert standings.match_result(club_score, opponent_score) == expected


def test_is_club_team_ignores_case_and_accents():
    assert standings.is_club_team(" étoile fc ", "Étoile FC")
    assert standings.is_club_team("Etoile FC (f)", "Étoile FC")
    assert not standings.is_club_team("Raja", "Étoile FC")


def test_match_statistics_split_sides_from_the_club_perspective():
    record = match(1, "Raja", "ClubA", 1, 2)
    scorers = [
        models.Contributor("Yassine", 2, player_id=4),
        models.Contributor("Adversaire", 1),
        models.Contributor("Nobody", 0, player_id=5),
    ]
    assisters = [models.Contributor("Hamza", 1, player_id=6)]

    statistics = standings.match_statistics(record, scorers, assisters, club_is_home=False)

    assert [item.player_name for item in statistics.away.scorers] == ["Yassine"]
    assert [item.player_name for item in statistics.home.scorers] == ["Adversaire"]
    assert [item.player_name for item in statistics.away.assisters] == ["Hamza"]
    assert statistics.result == standings.RESULT_WIN


def test_match_statistics_rejects_more_goals_than_scored():
    record = match(1, "ClubA", "Raja", 1, 0)

    with pytest.raises(ValidationError):
        standings.match_statistics(record, [models.Contributor("Yassine", 2, player_id=4)], [], club_is_home=True)
