"""League table and match statistics computed from recorded results."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

import structlog

from . import models
from .errors import SkippedRecord, ValidationError
from .normalize import normalize_name

logger = structlog.get_logger(__name__)

POINTS_WIN = 3
POINTS_DRAW = 1

RESULT_WIN = "Victoire"
RESULT_LOSS = "Défaite"
RESULT_DRAW = "Match nul"
RESULT_PENDING = "En attente"

FEMININE_SUFFIX = " (F)"


def _is_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_scored(match: models.MatchRecord) -> bool:
    return _is_score(match.score_home) and _is_score(match.score_away)


def _team_key(team_id: Optional[str], name: str, club_name: str, club_id: str) -> str:
    if team_id not in (None, ""):
        return str(team_id)
    if is_club_team(name, club_name):
        return club_id
    return (name or "").strip()


def _ranking_key(team: models.TeamStats):
    return (-team.points, -team.goal_difference, -team.goals_for, team.name.casefold(), team.team_id)


def compute_standings(
    category: str,
    club_name: str,
    matches: Iterable[models.MatchRecord],
    *,
    club_id: str = "club",
    club_logo_url: Optional[str] = None,
    opponents: Optional[Mapping[str, Optional[str]]] = None,
) -> models.StandingsTable:
    """Rank every team met in ``category``.

    ``opponents`` maps a team key (id or name) to its logo url. The club is
    always part of the table, even before its first scored match.
    """
    opponents = opponents or {}
    table: Dict[str, models.TeamStats] = {
        club_id: models.TeamStats(team_id=club_id, name=club_name, logo_url=club_logo_url)
    }
    skipped: List[SkippedRecord] = []

    def team(key: str, name: str) -> models.TeamStats:
        entry = table.get(key)
        if entry is None:
            entry = table[key] = models.TeamStats(team_id=key, name=name, logo_url=opponents.get(key))
        return entry

    for match in matches:
        if match.category != category:
            skipped.append(SkippedRecord(match.id, "other_category", match.category))
            continue
        if not is_scored(match):
            skipped.append(SkippedRecord(match.id, "unscored"))
            continue
        home_key = _team_key(match.home_team_id, match.home_team, club_name, club_id)
        away_key = _team_key(match.away_team_id, match.away_team, club_name, club_id)
        if not home_key or not away_key or not (match.home_team or "").strip() or not (match.away_team or "").strip():
            logger.warning("standings_match_skipped", match_id=match.id, reason="missing_team")
            skipped.append(SkippedRecord(match.id, "missing_team"))
            continue
        if home_key == away_key:
            logger.warning("standings_match_skipped", match_id=match.id, reason="same_team", team=home_key)
            skipped.append(SkippedRecord(match.id, "same_team", home_key))
            continue

        home = team(home_key, match.home_team.strip())
        away = team(away_key, match.away_team.strip())
        home.played += 1
        away.played += 1
        home.goals_for += match.score_home
        home.goals_against += match.score_away
        away.goals_for += match.score_away
        away.goals_against += match.score_home

        if match.score_home > match.score_away:
            home.wins += 1
            home.points += POINTS_WIN
            away.losses += 1
        elif match.score_away > match.score_home:
            away.wins += 1
            away.points += POINTS_WIN
            home.losses += 1
        else:
            home.draws += 1
            away.draws += 1
            home.points += POINTS_DRAW
            away.points += POINTS_DRAW

    rows = sorted(table.values(), key=_ranking_key)
    return models.StandingsTable(category=category, rows=rows, skipped=skipped)


def match_result(club_score: Optional[int], opponent_score: Optional[int]) -> str:
    if not _is_score(club_score) or not _is_score(opponent_score):
        return RESULT_PENDING
    if club_score > opponent_score:
        return RESULT_WIN
    if club_score < opponent_score:
        return RESULT_LOSS
    return RESULT_DRAW


def is_club_team(team_name: Optional[str], club_name: str) -> bool:
    """The club also enters women's categories as "<club> (F)"."""
    wanted = normalize_name(club_name)
    if not wanted:
        return False
    candidate = normalize_name(team_name)
    return candidate in (wanted, normalize_name(club_name + FEMININE_SUFFIX))


def _clean(contributors: Iterable[models.Contributor]) -> List[models.Contributor]:
    return [item for item in contributors if item.count and item.count > 0 and (item.player_name or item.player_id)]


def match_statistics(
    match: models.MatchRecord,
    scorers: Iterable[models.Contributor],
    assisters: Iterable[models.Contributor],
    *,
    club_is_home: bool,
) -> models.MatchStatistics:
    """Split scorers and assisters between the home and the away side.

    Contributors with a ``player_id`` are club players; the others are
    credited to the opposing side.
    """
    home = models.MatchSide(team=match.home_team, score=match.score_home)
    away = models.MatchSide(team=match.away_team, score=match.score_away)
    club_side, opponent_side = (home, away) if club_is_home else (away, home)

    for item in _clean(scorers):
        (club_side if item.player_id is not None else opponent_side).scorers.append(item)
    for item in _clean(assisters):
        (club_side if item.player_id is not None else opponent_side).assisters.append(item)

    for side in (home, away):
        if _is_score(side.score) and side.attributed_goals > side.score:
            raise ValidationError(
                f"{side.attributed_goals} buts attribués pour {side.team} qui n'a marqué que {side.score}."
            )

    return models.MatchStatistics(
        home=home,
        away=away,
        result=match_result(club_side.score, opponent_side.score),
    )
