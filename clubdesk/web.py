"""Web interface for the ClubDesk dashboard."""
from __future__ import annotations

import argparse
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog
from flask import Flask, Response, abort, flash, redirect, render_template, request, url_for

from . import config, ledger, models, storage
from .services import SALARY_PREFIX, ClubService, format_amount, is_home_location, season_label
from .storage import parse_date

logger = structlog.get_logger(__name__)

LEDGER_PAGES = {
    models.LEDGER_PAYMENT: {
        "endpoint": "payments_page",
        "detail": "payment_detail",
        "title": "Paiements",
        "owner_label": "Joueur",
        "filename": "paiements.csv",
    },
    models.LEDGER_SALARY: {
        "endpoint": "salaries_page",
        "detail": "salary_detail",
        "title": "Salaires",
        "owner_label": "Entraîneur",
        "filename": "salaires.csv",
    },
}


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    app.config.update(config.settings())
    if overrides:
        app.config.update(overrides)
    storage.use_data_file(app.config["CLUBDESK_DATA_FILE"])
    config.configure_logging(app.config["CLUBDESK_LOG_LEVEL"])

    def get_service() -> ClubService:
        return ClubService()

    @app.context_processor
    def inject_club_context():
        return {"club": get_service().get_club(), "currency": app.config["CLUBDESK_CURRENCY"]}

    @app.template_filter("format_currency")
    def format_currency(value: float) -> str:
        return format_amount(value or 0.0, app.config["CLUBDESK_CURRENCY"])

    @app.template_filter("format_date")
    def format_date(value: date | datetime | None, with_time: bool = False) -> str:
        if value is None:
            return "-"
        if isinstance(value, datetime) and with_time:
            return value.strftime("%d/%m/%Y %H:%M")
        return value.strftime("%d/%m/%Y")

    def _handle_date(field: str) -> Tuple[bool, date | None]:
        value = request.form.get(field)
        try:
            parsed = parse_date(value)
        except ValueError:
            return False, None
        return True, parsed

    def _handle_datetime(field: str) -> Tuple[bool, datetime | None]:
        value = request.form.get(field)
        if not value:
            return True, None
        try:
            return True, datetime.fromisoformat(value)
        except ValueError:
            return False, None

    def _flash_invalid(message: str) -> None:
        logger.info("form_rejected", path=request.path, message=message)
        flash(message, "error")

    def _parse_optional_int(value: Optional[str]) -> Optional[int]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def _form_text(field: str) -> Optional[str]:
        return request.form.get(field, "").strip() or None

    # Dashboard -------------------------------------------------------
    @app.get("/")
    def dashboard():
        service = get_service()
        summary = service.dashboard_summary()
        return render_template(
            "dashboard.html",
            title="Tableau de bord",
            active_page="dashboard",
            summary=summary,
            players_by_category=service.players_by_category(),
            event_titles={event.id: service.event_title(event) for event in summary["upcoming_events"]},
        )

    @app.get("/club")
    def club_page():
        return render_template("club.html", title="Paramètres du club", active_page="club")

    @app.post("/club")
    def save_club():
        service = get_service()
        try:
            service.update_club(
                name=request.form.get("name", ""),
                address=_form_text("address"),
                contact_email=_form_text("contact_email"),
                logo_url=_form_text("logo_url"),
            )
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Paramètres du club enregistrés.", "success")
        return redirect(url_for("club_page"))

    # Players ---------------------------------------------------------
    def _player_form() -> Tuple[bool, Dict[str, Any]]:
        ok_birth, birth_date = _handle_date("birth_date")
        ok_entry, entry_date = _handle_date("entry_date")
        if not ok_birth or not ok_entry:
            _flash_invalid("Date invalide pour le joueur.")
            return False, {}
        number_raw = request.form.get("number", "").strip()
        number = _parse_optional_int(number_raw)
        if number_raw and number is None:
            _flash_invalid("Numéro de maillot invalide.")
            return False, {}
        return True, {
            "gender": request.form.get("gender", "Masculin"),
            "status": request.form.get("status", "Actif"),
            "number": number,
            "position": _form_text("position"),
            "birth_date": birth_date,
            "entry_date": entry_date,
            "phone": _form_text("phone"),
            "email": _form_text("email"),
            "nationality": _form_text("nationality"),
            "cin": _form_text("cin"),
            "address": _form_text("address"),
            "coach_id": _parse_optional_int(request.form.get("coach_id")),
            "tutor_name": _form_text("tutor_name"),
            "tutor_phone": _form_text("tutor_phone"),
        }

    @app.get("/joueurs")
    def players_page():
        service = get_service()
        term = request.args.get("q", "").strip()
        field = request.args.get("champ", "name")
        players = service.search_players(term, field) if term else service.list_players()
        editing_player = None
        edit_id = _parse_optional_int(request.args.get("edit"))
        if edit_id is not None:
            editing_player = next((player for player in service.list_players() if player.id == edit_id), None)
        return render_template(
            "players.html",
            title="Joueurs",
            active_page="players",
            players=players,
            term=term,
            field=field,
            editing_player=editing_player,
            categories=service.category_names(),
            coaches=service.list_coaches(),
            statuses=models.PLAYER_STATUSES,
            genders=models.GENDERS,
        )

    @app.post("/joueurs")
    def save_player():
        player_id_raw = request.form.get("player_id")
        player_id = _parse_optional_int(player_id_raw)
        if player_id_raw and player_id is None:
            _flash_invalid("Joueur sélectionné invalide.")
            return redirect(url_for("players_page"))
        name = request.form.get("name", "").strip()
        category = request.form.get("category", "").strip()
        ok, details = _player_form()
        target = url_for("players_page", edit=player_id) if player_id else url_for("players_page")
        if not ok:
            return redirect(target)
        service = get_service()
        try:
            if player_id is None:
                service.add_player(name, category, **details)
                flash("Joueur ajouté avec succès !", "success")
            else:
                service.update_player(player_id, name=name, category=category, **details)
                flash("Joueur mis à jour avec succès !", "success")
        except ValueError as exc:
            _flash_invalid(str(exc))
            return redirect(target)
        return redirect(url_for("players_page"))

    @app.get("/joueurs/<int:player_id>")
    def player_detail(player_id: int):
        service = get_service()
        try:
            player = service.get_player(player_id)
        except ValueError:
            abort(404)
        report = service.payment_report()
        owner = next((item for item in report.owners if item.owner_id == player_id), None)
        return render_template(
            "person_detail.html",
            title=player.name,
            active_page="players",
            person=player,
            ledger=owner,
            ledger_kind=models.LEDGER_PAYMENT,
            statuses=models.PLAYER_STATUSES,
            status_url=url_for("player_status", player_id=player_id),
        )

    @app.post("/joueurs/<int:player_id>/statut")
    def player_status(player_id: int):
        service = get_service()
        try:
            service.set_player_status(player_id, request.form.get("status", ""))
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Statut du joueur mis à jour.", "success")
        return redirect(url_for("player_detail", player_id=player_id))

    @app.get("/joueurs/<int:player_id>/carte")
    def player_card(player_id: int):
        service = get_service()
        try:
            player = service.get_player(player_id)
        except ValueError:
            abort(404)
        return render_template(
            "player_cards.html",
            title=f"Carte - {player.name}",
            players=[player],
            season=season_label(),
        )

    @app.get("/rapports/cartes")
    def player_cards():
        service = get_service()
        category = request.args.get("categorie", "").strip()
        players = service.list_players()
        if category:
            players = [player for player in players if player.category == category]
        return render_template("player_cards.html", title="Cartes des joueurs", players=players, season=season_label())

    @app.get("/rapports/inscription")
    def registration_form():
        service = get_service()
        player = None
        player_id = _parse_optional_int(request.args.get("joueur"))
        if player_id is not None:
            try:
                player = service.get_player(player_id)
            except ValueError:
                abort(404)
        return render_template("registration_form.html", title="Fiche d'inscription", player=player, season=season_label())

    @app.post("/joueurs/<int:player_id>/supprimer")
    def delete_player(player_id: int):
        service = get_service()
        try:
            service.remove_player(player_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Joueur supprimé.", "success")
        return redirect(url_for("players_page"))

    # Coaches ---------------------------------------------------------
    @app.get("/entraineurs")
    def coaches_page():
        service = get_service()
        term = request.args.get("q", "").strip()
        field = request.args.get("champ", "name")
        coaches = service.search_coaches(term, field) if term else service.list_coaches()
        editing_coach = None
        edit_id = _parse_optional_int(request.args.get("edit"))
        if edit_id is not None:
            editing_coach = next((coach for coach in service.list_coaches() if coach.id == edit_id), None)
        return render_template(
            "coaches.html",
            title="Entraîneurs",
            active_page="coaches",
            coaches=coaches,
            term=term,
            field=field,
            editing_coach=editing_coach,
            categories=service.category_names(),
            statuses=models.COACH_STATUSES,
        )

    @app.post("/entraineurs")
    def save_coach():
        coach_id_raw = request.form.get("coach_id")
        coach_id = _parse_optional_int(coach_id_raw)
        if coach_id_raw and coach_id is None:
            _flash_invalid("Entraîneur sélectionné invalide.")
            return redirect(url_for("coaches_page"))
        ok_entry, entry_date = _handle_date("entry_date")
        target = url_for("coaches_page", edit=coach_id) if coach_id else url_for("coaches_page")
        if not ok_entry:
            _flash_invalid("Date d'entrée invalide.")
            return redirect(target)
        details = {
            "status": request.form.get("status", "Actif"),
            "specialty": _form_text("specialty"),
            "phone": _form_text("phone"),
            "email": _form_text("email"),
            "nationality": _form_text("nationality"),
            "cin": _form_text("cin"),
            "address": _form_text("address"),
            "entry_date": entry_date,
        }
        name = request.form.get("name", "").strip()
        category = request.form.get("category", "").strip()
        service = get_service()
        try:
            if coach_id is None:
                service.add_coach(name, category, **details)
                flash("Entraîneur ajouté avec succès !", "success")
            else:
                service.update_coach(coach_id, name=name, category=category, **details)
                flash("Entraîneur mis à jour avec succès !", "success")
        except ValueError as exc:
            _flash_invalid(str(exc))
            return redirect(target)
        return redirect(url_for("coaches_page"))

    @app.get("/entraineurs/<int:coach_id>")
    def coach_detail(coach_id: int):
        service = get_service()
        try:
            coach = service.get_coach(coach_id)
        except ValueError:
            abort(404)
        report = service.salary_report()
        owner = next((item for item in report.owners if item.owner_id == coach_id), None)
        return render_template(
            "person_detail.html",
            title=coach.name,
            active_page="coaches",
            person=coach,
            ledger=owner,
            ledger_kind=models.LEDGER_SALARY,
            statuses=models.COACH_STATUSES,
            status_url=url_for("coach_status", coach_id=coach_id),
        )

    @app.post("/entraineurs/<int:coach_id>/statut")
    def coach_status(coach_id: int):
        service = get_service()
        try:
            service.set_coach_status(coach_id, request.form.get("status", ""))
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Statut de l'entraîneur mis à jour.", "success")
        return redirect(url_for("coach_detail", coach_id=coach_id))

    @app.post("/entraineurs/<int:coach_id>/supprimer")
    def delete_coach(coach_id: int):
        service = get_service()
        try:
            service.remove_coach(coach_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Entraîneur supprimé.", "success")
        return redirect(url_for("coaches_page"))

    # Categories and opponents ----------------------------------------
    @app.get("/categories")
    def categories_page():
        service = get_service()
        return render_template(
            "categories.html",
            title="Catégories",
            active_page="categories",
            categories=service.list_categories(),
            standard_categories=config.PLAYER_CATEGORIES,
            coaches=service.list_coaches(),
        )

    @app.post("/categories")
    def add_category():
        service = get_service()
        try:
            service.add_category(
                request.form.get("name", ""), _parse_optional_int(request.form.get("coach_id"))
            )
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Catégorie ajoutée.", "success")
        return redirect(url_for("categories_page"))

    @app.post("/categories/<int:category_id>/supprimer")
    def delete_category(category_id: int):
        service = get_service()
        try:
            service.remove_category(category_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Catégorie supprimée.", "success")
        return redirect(url_for("categories_page"))

    @app.get("/adversaires")
    def opponents_page():
        service = get_service()
        opponents = service.list_opponents()
        editing_opponent = None
        edit_id = _parse_optional_int(request.args.get("edit"))
        if edit_id is not None:
            editing_opponent = next((item for item in opponents if item.id == edit_id), None)
        return render_template(
            "opponents.html",
            title="Équipes adverses",
            active_page="opponents",
            opponents=opponents,
            editing_opponent=editing_opponent,
        )

    @app.post("/adversaires")
    def save_opponent():
        opponent_id = _parse_optional_int(request.form.get("opponent_id"))
        name = request.form.get("name", "")
        logo_url = _form_text("logo_url")
        service = get_service()
        try:
            if opponent_id is None:
                service.add_opponent(name, logo_url)
                flash("Équipe adverse ajoutée.", "success")
            else:
                service.update_opponent(opponent_id, name=name, logo_url=logo_url)
                flash("Équipe adverse mise à jour.", "success")
        except ValueError as exc:
            _flash_invalid(str(exc))
            if opponent_id is not None:
                return redirect(url_for("opponents_page", edit=opponent_id))
        return redirect(url_for("opponents_page"))

    @app.post("/adversaires/<int:opponent_id>/supprimer")
    def delete_opponent(opponent_id: int):
        service = get_service()
        try:
            service.remove_opponent(opponent_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Équipe adverse supprimée.", "success")
        return redirect(url_for("opponents_page"))

    # Events ----------------------------------------------------------
    @app.get("/evenements")
    def events_page():
        service = get_service()
        day_raw = request.args.get("jour")
        selected_day = None
        if day_raw:
            try:
                selected_day = parse_date(day_raw)
            except ValueError:
                _flash_invalid("Date sélectionnée invalide.")
        events = service.events_on(selected_day) if selected_day else service.list_events()
        editing_event = None
        edit_id = _parse_optional_int(request.args.get("edit"))
        if edit_id is not None:
            editing_event = next((item for item in service.list_events() if item.id == edit_id), None)
        return render_template(
            "events.html",
            title="Calendrier",
            active_page="events",
            events=events,
            selected_day=selected_day,
            editing_event=editing_event,
            titles={event.id: service.event_title(event) for event in events},
            event_types=config.EVENT_TYPES,
            categories=service.category_names(),
            opponents=service.list_opponents(),
        )

    @app.post("/evenements")
    def add_event():
        event_id = _parse_optional_int(request.form.get("event_id"))
        retry_url = url_for("events_page", edit=event_id) if event_id is not None else url_for("events_page")
        ok, when = _handle_datetime("date")
        if not ok or when is None:
            _flash_invalid("Date de l'événement invalide.")
            return redirect(retry_url)
        service = get_service()
        try:
            if event_id is None:
                event = service.add_event(
                    request.form.get("type", ""),
                    request.form.get("category", ""),
                    when,
                    request.form.get("location", ""),
                    opponent_id=_parse_optional_int(request.form.get("opponent_id")),
                    notes=_form_text("notes"),
                )
                flash("Événement ajouté au calendrier.", "success")
            else:
                event = service.update_event(
                    event_id,
                    event_type=request.form.get("type", ""),
                    category=request.form.get("category", ""),
                    when=when,
                    location=request.form.get("location", ""),
                    opponent_id=_parse_optional_int(request.form.get("opponent_id")),
                    notes=_form_text("notes"),
                )
                flash("Événement mis à jour.", "success")
        except ValueError as exc:
            _flash_invalid(str(exc))
            return redirect(retry_url)
        return redirect(url_for("event_detail", event_id=event.id))

    @app.get("/evenements/<int:event_id>")
    def event_detail(event_id: int):
        service = get_service()
        try:
            event = service.get_event(event_id)
        except ValueError:
            abort(404)
        statistics = None
        try:
            statistics = service.event_statistics(event)
        except ValueError as exc:
            _flash_invalid(str(exc))
        return render_template(
            "event_detail.html",
            title=service.event_title(event),
            active_page="events",
            event=event,
            statistics=statistics,
            is_home=is_home_location(event.location),
            players=[player for player in service.list_players() if player.category == event.category],
        )

    def _contributors(id_field: str, name_field: str, count_field: str, count_key: str) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        ids = request.form.getlist(id_field)
        for player_id, count in zip(ids, request.form.getlist(count_field)):
            entries.append({"player_id": _parse_optional_int(player_id), count_key: count})
        names = request.form.getlist(name_field)
        for name, count in zip(names, request.form.getlist(f"opponent_{count_field}")):
            entries.append({"player_name": name, count_key: count})
        return [entry for entry in entries if entry.get("player_id") is not None or entry.get("player_name")]

    @app.post("/evenements/<int:event_id>/score")
    def record_score(event_id: int):
        service = get_service()
        try:
            service.record_score(
                event_id,
                request.form.get("score_home"),
                request.form.get("score_away"),
                scorers=_contributors("scorer_id", "opponent_scorer_name", "scorer_goals", "goals"),
                assisters=_contributors("assister_id", "opponent_assister_name", "assister_count", "assists"),
            )
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Score enregistré.", "success")
        return redirect(url_for("event_detail", event_id=event_id))

    @app.post("/evenements/<int:event_id>/supprimer")
    def delete_event(event_id: int):
        service = get_service()
        try:
            service.remove_event(event_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Événement supprimé.", "success")
        return redirect(url_for("events_page"))

    # Payments and salaries -------------------------------------------
    def _render_ledger(kind: str):
        service = get_service()
        page = LEDGER_PAGES[kind]
        report = service.ledger_report(kind)
        term = request.args.get("q", "").strip()
        field = request.args.get("champ", "owner")
        matches = service.search_ledger(report, term, field) if term else report.records
        editing_record = None
        edit_id = _parse_optional_int(request.args.get("edit"))
        if edit_id is not None:
            editing_record = next((item.record for item in report.records if item.id == edit_id), None)
        if kind == models.LEDGER_PAYMENT:
            owners = service.list_players()
            default_amount = config.DEFAULT_PAYMENT_AMOUNT
            default_description = config.DEFAULT_PAYMENT_DESCRIPTION
        else:
            owners = service.list_coaches() if editing_record else service.salary_eligible_coaches()
            default_amount = config.DEFAULT_SALARY_AMOUNT
            default_description = ledger.monthly_description(SALARY_PREFIX)
        return render_template(
            "ledger.html",
            title=page["title"],
            active_page=page["endpoint"],
            page=page,
            kind=kind,
            report=report,
            matches=matches,
            term=term,
            field=field,
            owners=owners,
            editing_record=editing_record,
            default_amount=default_amount,
            default_description=default_description,
            methods=config.PAYMENT_METHODS,
        )

    def _save_ledger(kind: str):
        page = LEDGER_PAGES[kind]
        record_id = _parse_optional_int(request.form.get("record_id"))
        owner_id = _parse_optional_int(request.form.get("owner_id"))
        if owner_id is None:
            _flash_invalid(f"{page['owner_label']} requis.")
            return redirect(url_for(page["endpoint"]))
        description = request.form.get("description", "").strip()
        if not description and kind == models.LEDGER_SALARY:
            description = ledger.monthly_description(SALARY_PREFIX)
        service = get_service()
        try:
            if record_id is None:
                record = service.add_ledger_record(
                    kind,
                    owner_id,
                    request.form.get("total_amount"),
                    description,
                    initial_amount=request.form.get("initial_amount") or None,
                    method=request.form.get("method", "Espèces"),
                )
                flash("Enregistrement ajouté.", "success")
            else:
                record = service.update_ledger_record(
                    kind,
                    record_id,
                    owner_id=owner_id,
                    total_amount=request.form.get("total_amount"),
                    description=description,
                )
                flash("Enregistrement mis à jour.", "success")
        except ValueError as exc:
            _flash_invalid(str(exc))
            if record_id is not None:
                return redirect(url_for(page["endpoint"], edit=record_id))
            return redirect(url_for(page["endpoint"]))
        return redirect(url_for(page["detail"], record_id=record.id))

    def _render_ledger_detail(kind: str, record_id: int):
        service = get_service()
        page = LEDGER_PAGES[kind]
        try:
            summary = service.ledger_summary(kind, record_id)
        except ValueError:
            abort(404)
        template = "receipt.html" if request.args.get("recu") else "ledger_detail.html"
        return render_template(
            template,
            title=f"{page['title']} - {summary.owner_name}",
            active_page=page["endpoint"],
            page=page,
            kind=kind,
            summary=summary,
            methods=config.PAYMENT_METHODS,
        )

    def _add_ledger_transaction(kind: str, record_id: int):
        page = LEDGER_PAGES[kind]
        service = get_service()
        try:
            service.add_ledger_transaction(
                kind, record_id, request.form.get("amount"), request.form.get("method", "Espèces")
            )
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Versement enregistré.", "success")
        return redirect(url_for(page["detail"], record_id=record_id))

    def _toggle_overdue(kind: str, record_id: int):
        page = LEDGER_PAGES[kind]
        service = get_service()
        try:
            service.set_ledger_overdue(kind, record_id, request.form.get("overdue") == "1")
        except ValueError as exc:
            _flash_invalid(str(exc))
        return redirect(url_for(page["detail"], record_id=record_id))

    def _delete_ledger(kind: str, record_id: int):
        page = LEDGER_PAGES[kind]
        service = get_service()
        try:
            service.remove_ledger_record(kind, record_id)
        except ValueError as exc:
            _flash_invalid(str(exc))
        else:
            flash("Enregistrement supprimé.", "success")
        return redirect(url_for(page["endpoint"]))

    def _export_ledger(kind: str) -> Response:
        content = get_service().export_ledger_csv(kind)
        return Response(
            content,
            mimetype="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename={LEDGER_PAGES[kind]['filename']}"},
        )

    @app.get("/paiements")
    def payments_page():
        return _render_ledger(models.LEDGER_PAYMENT)

    @app.post("/paiements")
    def add_payment():
        return _save_ledger(models.LEDGER_PAYMENT)

    @app.get("/paiements/<int:record_id>")
    def payment_detail(record_id: int):
        return _render_ledger_detail(models.LEDGER_PAYMENT, record_id)

    @app.post("/paiements/<int:record_id>/versement")
    def payment_transaction(record_id: int):
        return _add_ledger_transaction(models.LEDGER_PAYMENT, record_id)

    @app.post("/paiements/<int:record_id>/retard")
    def payment_overdue(record_id: int):
        return _toggle_overdue(models.LEDGER_PAYMENT, record_id)

    @app.post("/paiements/<int:record_id>/supprimer")
    def delete_payment(record_id: int):
        return _delete_ledger(models.LEDGER_PAYMENT, record_id)

    @app.get("/paiements/export.csv")
    def export_payments():
        return _export_ledger(models.LEDGER_PAYMENT)

    @app.get("/salaires")
    def salaries_page():
        return _render_ledger(models.LEDGER_SALARY)

    @app.post("/salaires")
    def add_salary():
        return _save_ledger(models.LEDGER_SALARY)

    @app.get("/salaires/<int:record_id>")
    def salary_detail(record_id: int):
        return _render_ledger_detail(models.LEDGER_SALARY, record_id)

    @app.post("/salaires/<int:record_id>/versement")
    def salary_transaction(record_id: int):
        return _add_ledger_transaction(models.LEDGER_SALARY, record_id)

    @app.post("/salaires/<int:record_id>/retard")
    def salary_overdue(record_id: int):
        return _toggle_overdue(models.LEDGER_SALARY, record_id)

    @app.post("/salaires/<int:record_id>/supprimer")
    def delete_salary(record_id: int):
        return _delete_ledger(models.LEDGER_SALARY, record_id)

    @app.get("/salaires/export.csv")
    def export_salaries():
        return _export_ledger(models.LEDGER_SALARY)

    # Rankings --------------------------------------------------------
    @app.get("/classement")
    def rankings_page():
        service = get_service()
        categories = service.category_names()
        category = request.args.get("categorie") or (categories[0] if categories else "")
        competition = request.args.get("competition") or config.DEFAULT_COMPETITION
        table = service.standings(category, competition)
        return render_template(
            "rankings.html",
            title="Classement",
            active_page="rankings",
            table=table,
            category=category,
            competition=competition,
            categories=categories,
            competitions=config.COMPETITION_TYPES,
        )

    return app


app = create_app()


def main() -> None:
    parser = argparse.ArgumentParser(description="Démarrer l'interface web ClubDesk")
    parser.add_argument("--host", default="0.0.0.0", help="Hôte à utiliser")
    parser.add_argument("--port", type=int, default=5000, help="Port du serveur")
    parser.add_argument("--debug", action="store_true", help="Activer le mode debug")
    args = parser.parse_args()
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
