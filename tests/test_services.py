import json
from datetime import date, datetime

import pytest

from clubdesk import models, services
from clubdesk.errors import ValidationError


@pytest.fixture
def player(service):
    return service.add_player("Yassine Bounou", "U15", position="Gardien", number=1)


@pytest.fixture
def coach(service):
    return service.add_coach("Walid Regragui", "Seniors", specialty="Tactique")


@pytest.fixture
def opponent(service):
    return service.add_opponent("Raja Club", "https://example.org/raja.png")


def test_players_are_persisted_and_sorted(service, data_file):
    service.add_player("Zakaria", "U15")
    service.add_player("Élias", "U17", birth_date=date(2010, 4, 2))
    service.add_player("Amine", "U15")

    reloaded = services.ClubService()

    assert [player.name for player in reloaded.list_players()] == ["Amine", "Élias", "Zakaria"]
    elias = reloaded.search_players("élias")[0]
    assert elias.birth_date == date(2010, 4, 2)
    assert json.loads(data_file.read_text(encoding="utf-8"))["players"][1]["birth_date"] == "2010-04-02"


def test_add_player_validation(service):
    with pytest.raises(ValidationError):
        service.add_player("A", "U15")
    with pytest.raises(ValidationError):
        service.add_player("Amine", "")
    with pytest.raises(ValidationError):
        service.add_player("Amine", "U15", status="Retraité")
    with pytest.raises(ValueError):
        service.add_player("Amine", "U15", shoe_size=42)


def test_update_and_status(service, player):
    service.update_player(player.id, position="Défenseur")
    updated = service.set_player_status(player.id, "Blessé")

    assert updated.position == "Défenseur"
    assert updated.status == "Blessé"
    with pytest.raises(ValidationError):
        service.set_player_status(player.id, "En vacances")


def test_get_missing_player(service):
    with pytest.raises(ValueError, match="introuvable"):
        service.get_player(99)


def test_search_players_by_field(service):
    service.add_player("Amine", "U15", position="Attaquant")
    service.add_player("Badr", "U17", position="Défenseur")

    assert [player.name for player in service.search_players("u17", "category")] == ["Badr"]
    assert [player.name for player in service.search_players("att", "position")] == ["Amine"]
    assert len(service.search_players("", "name")) == 2


def test_players_by_category(service):
    service.add_player("Amine", "U17")
    service.add_player("Badr", "U15")
    service.add_player("Chakib", "U15")

    assert service.players_by_category() == [("U15", 2), ("U17", 1)]


def test_remove_player_removes_payments(service, player):
    service.add_payment(player.id, 1500)

    service.remove_player(player.id)

    assert service.payment_report().records == []
    assert service.list_ledger(models.LEDGER_PAYMENT) == []


def test_coaches_crud(service, coach):
    assert service.get_coach(coach.id).specialty == "Tactique"
    assert service.set_coach_status(coach.id, "Inactif").status == "Inactif"
    with pytest.raises(ValidationError):
        service.set_coach_status(coach.id, "Blessé")
    assert [item.name for item in service.search_coaches("tact", "specialty")] == ["Walid Regragui"]
    service.remove_coach(coach.id)
    assert service.list_coaches() == []


def test_categories(service, coach):
    category = service.add_category("U21", coach.id)

    assert "U21" in service.category_names()
    assert "Seniors" in service.category_names()
    with pytest.raises(ValidationError):
        service.add_category(" u21 ")
    service.remove_category(category.id)
    assert service.list_categories() == []


def test_club_settings(service):
    assert service.get_club().name == "Votre Club"

    club = service.update_club(name="Étoile FC", logo_url="https://example.org/logo.png")

    assert club.name == "Étoile FC"
    assert services.ClubService().get_club().logo_url == "https://example.org/logo.png"


def test_opponent_names_are_unique_after_normalization(service, opponent):
    with pytest.raises(ValidationError, match="existe déjà"):
        service.add_opponent("  RAJA club ")
    with pytest.raises(ValidationError):
        service.add_opponent("Wydad", "ftp://logo")

    wydad = service.add_opponent("Wydad")
    renamed = service.update_opponent(wydad.id, name="Wydad AC")

    assert renamed.name == "Wydad AC"
    assert [item.name for item in service.list_opponents()] == ["Raja Club", "Wydad AC"]


def test_opponent_used_by_event_cannot_be_removed(service, opponent, when):
    service.add_event("Match de Championnat", "U15", when, "Domicile", opponent.id)

    with pytest.raises(ValueError):
        service.remove_opponent(opponent.id)


def test_match_requires_opponent(service, when):
    with pytest.raises(ValidationError):
        service.add_event("Match de Championnat", "U15", when, "Domicile")

    training = service.add_event("Entraînement", "U15", when, "Stade municipal", opponent_id=4)

    assert training.opponent_id is None
    assert not training.is_match


def test_events_listing(service, opponent):
    service.add_event("Entraînement", "U15", datetime(2024, 5, 10, 18), "Stade")
    service.add_event("Match de Coupe", "U15", datetime(2024, 5, 12, 15), "Extérieur", opponent.id)
    service.add_event("Réunion", "Seniors", datetime(2024, 5, 1, 9), "Club house")

    assert [event.type for event in service.list_events()] == ["Réunion", "Entraînement", "Match de Coupe"]
    assert [event.type for event in service.events_on(date(2024, 5, 12))] == ["Match de Coupe"]
    upcoming = service.upcoming_events(limit=1, now=datetime(2024, 5, 2))
    assert [event.type for event in upcoming] == ["Entraînement"]


def test_update_event(service, opponent, when):
    event = service.add_event("Entraînement", "U15", when, "Stade")

    updated = service.update_event(event.id, location="Complexe sportif", notes="Séance vidéo")

    assert updated.location == "Complexe sportif"
    assert updated.notes == "Séance vidéo"
    service.remove_event(event.id)
    assert service.list_events() == []


def test_record_score_and_statistics(service, opponent, player, when):
    event = service.add_event("Match de Championnat", "U15", when, "Extérieur", opponent.id)

    scored = service.record_score(
        event.id,
        2,
        1,
        scorers=[{"player_name": "Adversaire", "goals": 2}],
        assisters=[{"player_id": player.id, "assists": 1}],
    )
    statistics = service.event_statistics(scored)

    assert statistics.home.team == "Raja Club"
    assert statistics.away.team == "Votre Club"
    assert statistics.result == "Défaite"
    assert [item.player_name for item in statistics.away.assisters] == ["Yassine Bounou"]


def test_record_score_rejects_too_many_scorers(service, opponent, player, when):
    event = service.add_event("Match de Championnat", "U15", when, "Domicile", opponent.id)

    with pytest.raises(ValidationError):
        service.record_score(event.id, 1, 0, scorers=[{"player_id": player.id, "goals": 2}])
    assert service.get_event(event.id).score_home is None


def test_record_score_requires_a_match(service, when):
    event = service.add_event("Entraînement", "U15", when, "Stade")

    with pytest.raises(ValidationError):
        service.record_score(event.id, 1, 0)


def test_standings_from_recorded_matches(service, when):
    service.update_club(name="ClubA")
    opponent_x = service.add_opponent("OpponentX")
    opponent_y = service.add_opponent("OpponentY")
    first = service.add_event("Match de Championnat", "U15", when, "Domicile", opponent_x.id)
    second = service.add_event("Match de Championnat", "U15", when, "Domicile", opponent_y.id)
    cup = service.add_event("Match de Coupe", "U15", when, "Domicile", opponent_y.id)
    service.record_score(first.id, 2, 1)
    service.record_score(second.id, 0, 0)
    service.record_score(cup.id, 5, 0)

    table = service.standings("U15")

    assert [row.name for row in table.rows] == ["ClubA", "OpponentY", "OpponentX"]
    assert table.rows[0].points == 4
    assert table.rows[0].goals_for == 2


def test_standings_keep_history_when_opponent_is_renamed(service, opponent, when):
    event = service.add_event("Match de Championnat", "U15", when, "Domicile", opponent.id)
    service.record_score(event.id, 0, 1)
    service.update_opponent(opponent.id, name="Raja Casablanca")

    table = service.standings("U15")

    assert [row.name for row in table.rows] == ["Raja Casablanca", "Votre Club"]
    assert table.rows[0].logo_url == "https://example.org/raja.png"


def test_payment_lifecycle(service, player, when):
    payment = service.add_payment(player.id, "1 500", initial_amount=500, when=when)
    assert service.get_payment_summary(payment.id).status == models.STATUS_PARTIAL

    service.add_payment_transaction(payment.id, 1000, "Virement")
    summary = service.get_payment_summary(payment.id)

    assert summary.amount_paid == 1500
    assert summary.amount_remaining == 0
    assert summary.status == models.STATUS_PAID
    assert [item.method for item in summary.record.transactions] == ["Espèces", "Virement"]


def test_payment_validation(service, player):
    with pytest.raises(ValidationError, match="avance"):
        service.add_payment(player.id, 1000, initial_amount=1500)
    with pytest.raises(ValidationError):
        service.add_payment(player.id, 0)
    with pytest.raises(ValidationError):
        service.add_payment(42, 1000)
    payment = service.add_payment(player.id, 1000)
    with pytest.raises(ValidationError):
        service.add_payment_transaction(payment.id, -5)


def test_overdue_flag_round_trip(service, player):
    payment = service.add_payment(player.id, 1000, initial_amount=200)

    assert service.set_payment_overdue(payment.id, True).status == models.STATUS_OVERDUE
    assert service.get_payment_summary(payment.id).status == models.STATUS_OVERDUE
    assert service.payment_report().owners[0].overall_status == models.STATUS_PARTIAL
    assert service.set_payment_overdue(payment.id, False).status == models.STATUS_PARTIAL


def test_legacy_overdue_status_is_migrated(data_file):
    data_file.write_text(
        json.dumps(
            {
                "players": [{"id": 1, "name": "Amine", "category": "U15"}],
                "payments": [
                    {"id": 1, "owner_id": 1, "description": "Cotisation", "total_amount": 100, "status": "En retard"}
                ],
            }
        ),
        encoding="utf-8",
    )

    service = services.ClubService()

    record = service.list_ledger(models.LEDGER_PAYMENT)[0]
    assert record.overdue is True
    assert record.transactions == []
    assert service.payment_report().records[0].status == models.STATUS_OVERDUE


def test_update_payment(service, player):
    payment = service.add_payment(player.id, 1000, initial_amount=1000)

    updated = service.update_payment(payment.id, total_amount=1200, description="Cotisation + équipement")

    assert updated.status == models.STATUS_PARTIAL
    assert updated.description == "Cotisation + équipement"
    service.remove_payment(payment.id)
    assert service.payment_report().records == []


def test_salary_defaults_and_eligibility(service, coach):
    other = service.add_coach("Hervé Renard")
    salary = service.add_salary(coach.id, 5000, when=datetime(2024, 5, 3))

    assert salary.description == "Salaire mai 2024"
    eligible = service.salary_eligible_coaches(date(2024, 5, 20))
    assert {item.id for item in eligible} == {coach.id, other.id}

    service.add_salary_transaction(salary.id, 5000)

    eligible = service.salary_eligible_coaches(date(2024, 5, 20))
    assert [item.id for item in eligible] == [other.id]
    assert {item.id for item in service.salary_eligible_coaches(date(2024, 6, 1))} == {coach.id, other.id}


def test_search_ledger(service, player, coach):
    other = service.add_player("Badr", "U15")
    service.add_payment(player.id, 1000, initial_amount=1000)
    service.add_payment(other.id, 1000)
    report = service.payment_report()

    assert [item.owner_name for item in service.search_ledger(report, "badr")] == ["Badr"]
    assert [item.owner_name for item in service.search_ledger(report, "payé", "status")] == ["Yassine Bounou"]


def test_export_ledger_csv(service, player):
    service.add_payment(player.id, 1500, initial_amount=500, when=datetime(2024, 5, 1, 10, 30))

    content = service.export_ledger_csv(models.LEDGER_PAYMENT)

    assert content.startswith("\ufeff")
    lines = content.lstrip("\ufeff").splitlines()
    assert lines[0].split(";")[0] == "Joueur"
    assert lines[1] == "Yassine Bounou;Cotisation annuelle;1500.00;500.00;1000.00;Partiel;2024-05-01 10:30"


def test_dashboard_summary(service, player, opponent):
    service.add_payment(player.id, 1500, initial_amount=500, when=datetime(2024, 5, 3))
    service.add_payment(player.id, 300, initial_amount=300, when=datetime(2024, 4, 3))
    for day in range(1, 8):
        service.add_event("Entraînement", "U15", datetime(2024, 5, 10 + day, 18), "Stade")

    summary = service.dashboard_summary(now=datetime(2024, 5, 10))

    assert summary["players"] == 1
    assert summary["coaches"] == 0
    assert summary["month_revenue"] == 500
    assert summary["outstanding_payments"] == 1000
    assert len(summary["upcoming_events"]) == 5


def test_format_amount():
    assert services.format_amount(1500, "MAD") == "1 500,00 MAD"
    assert services.format_amount(12.5, "MAD") == "12,50 MAD"


def test_payment_without_total_does_not_break_the_report(data_file):
    data_file.write_text(
        json.dumps(
            {
                "players": [{"id": 1, "name": "Amine", "category": "U15"}],
                "payments": [
                    {"id": 1, "owner_id": 1, "description": "Cotisation", "transactions": []},
                    {"id": 2, "owner_id": 1, "description": "Stage", "total_amount": "300", "transactions": []},
                ],
            }
        ),
        encoding="utf-8",
    )

    service = services.ClubService()

    report = service.payment_report()
    assert {summary.record.description: summary.status for summary in report.records} == {
        "Cotisation": models.STATUS_PAID,
        "Stage": models.STATUS_PENDING,
    }
    assert report.skipped == []
    assert service.dashboard_summary(datetime(2024, 5, 1))["outstanding_payments"] == 300
    assert service.get_payment_summary(1).amount_remaining == 0


@pytest.mark.parametrize(
    "day, expected",
    [(date(2024, 9, 1), "2024-2025"), (date(2025, 3, 15), "2024-2025"), (date(2025, 7, 1), "2025-2026")],
)
def test_season_label(day, expected):
    assert services.season_label(day) == expected
