"""Business services for managing the club entities."""
from __future__ import annotations

from collections import Counter
from dataclasses import fields
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

import pandas as pd
import structlog

from . import config, ledger, models, standings, storage
from .errors import ValidationError
from .normalize import coerce_amount, coerce_int, collation_key, contains, normalize_name

logger = structlog.get_logger(__name__)

UNSET = object()

LEDGER_COLLECTIONS = {
    models.LEDGER_PAYMENT: "payments",
    models.LEDGER_SALARY: "salaries",
}
LEDGER_OWNERS = {
    models.LEDGER_PAYMENT: "players",
    models.LEDGER_SALARY: "coaches",
}
UNKNOWN_OWNER = {
    models.LEDGER_PAYMENT: "Joueur inconnu",
    models.LEDGER_SALARY: "Entraîneur inconnu",
}
SALARY_PREFIX = "Salaire"

AWAY_LOCATIONS = {"exterieur", "a l'exterieur", "away"}
CLUB_TEAM_ID = "club"

PLAYER_SEARCH_FIELDS = ("name", "category", "status", "position")
COACH_SEARCH_FIELDS = ("name", "category", "status", "specialty")


def opponent_team_id(opponent_id: int) -> str:
    return f"opponent-{opponent_id}"


def is_home_location(location: Optional[str]) -> bool:
    return normalize_name(location) not in AWAY_LOCATIONS


def season_label(on: Optional[date] = None) -> str:
    """Sporting season for a day, e.g. "2024-2025"; seasons start in July."""
    on = on or date.today()
    start = on.year if on.month >= 7 else on.year - 1
    return f"{start}-{start + 1}"


def ledger_record_from(payload: Dict[str, Any]) -> models.LedgerRecord:
    """Build a ledger record from stored data, tolerating missing figures."""
    payload = dict(payload)
    payload.setdefault("owner_id", None)
    payload["description"] = payload.get("description") or ""
    payload["total_amount"] = coerce_amount(payload.get("total_amount")) or 0.0
    return storage.instantiate(models.LedgerRecord, payload)


class ClubService:
    """Facade that exposes CRUD helpers for the different entities."""

    def __init__(self) -> None:
        self._data = storage.load_data()
        self._migrate_legacy_fields()

    def _migrate_legacy_fields(self) -> None:
        changed = False
        for key in LEDGER_COLLECTIONS.values():
            for item in self._data.setdefault(key, []):
                if item.get("transactions") is None:
                    item["transactions"] = []
                    changed = True
                if "overdue" not in item:
                    item["overdue"] = item.get("status") == models.STATUS_OVERDUE
                    changed = True
        if changed:
            self._persist()

    # Generic helpers -------------------------------------------------
    def _create_entity(self, key: str, payload: Dict) -> Dict:
        collection = self._data.setdefault(key, [])
        payload = dict(payload)
        payload["id"] = storage.next_id(collection)
        collection.append(payload)
        self._persist()
        logger.info("entity_created", collection=key, id=payload["id"])
        return payload

    def _list_entities(self, key: str) -> List[Dict]:
        return list(self._data.setdefault(key, []))

    def _find_entity(self, key: str, entity_id: int) -> Dict | None:
        for item in self._data.setdefault(key, []):
            if int(item.get("id")) == entity_id:
                return item
        return None

    def _get_entity(self, key: str, entity_id: int, label: str) -> Dict:
        item = self._find_entity(key, entity_id)
        if item is None:
            raise ValueError(f"{label} avec l'id {entity_id} introuvable")
        return item

    def _update_entity(self, key: str, entity_id: int, updates: Dict) -> Dict:
        for item in self._data.setdefault(key, []):
            if int(item.get("id")) == entity_id:
                item.update(updates)
                self._persist()
                return item
        raise ValueError(f"Élément {entity_id} introuvable dans {key}")

    def _remove_entity(self, key: str, entity_id: int) -> None:
        collection = self._data.setdefault(key, [])
        for index, item in enumerate(collection):
            if int(item.get("id")) == entity_id:
                del collection[index]
                self._persist()
                logger.info("entity_removed", collection=key, id=entity_id)
                return
        raise ValueError(f"Élément {entity_id} introuvable dans {key}")

    def _persist(self) -> None:
        storage.save_data(self._data)

    def _person_payload(self, model_cls: Type[models.Person], details: Dict[str, Any]) -> Dict[str, Any]:
        allowed = {item.name for item in fields(model_cls)} - {"id"}
        unknown = set(details) - allowed
        if unknown:
            raise ValueError(f"Champs inconnus: {', '.join(sorted(unknown))}")
        payload: Dict[str, Any] = {}
        for key, value in details.items():
            if isinstance(value, str):
                value = value.strip() or None
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            payload[key] = value
        return payload

    def _check_name(self, name: Optional[str], message: str) -> str:
        name = (name or "").strip()
        if len(name) < 2:
            raise ValidationError(message)
        return name

    # Club ------------------------------------------------------------
    def get_club(self) -> models.Club:
        payload = dict(self._data.setdefault("club", {}))
        payload["name"] = payload.get("name") or config.DEFAULT_CLUB_NAME
        return storage.instantiate(models.Club, payload)

    def update_club(
        self,
        *,
        name: Optional[str] = None,
        address: object | str | None = UNSET,
        contact_email: object | str | None = UNSET,
        logo_url: object | str | None = UNSET,
    ) -> models.Club:
        club = self._data.setdefault("club", {})
        if name is not None:
            club["name"] = self._check_name(name, "Le nom du club doit contenir au moins 2 caractères.")
        if address is not UNSET:
            club["address"] = address or None
        if contact_email is not UNSET:
            club["contact_email"] = contact_email or None
        if logo_url is not UNSET:
            club["logo_url"] = logo_url or None
        self._persist()
        return self.get_club()

    # Categories ------------------------------------------------------
    def add_category(self, name: str, coach_id: Optional[int] = None) -> models.Category:
        name = self._check_name(name, "Le nom de la catégorie doit contenir au moins 2 caractères.")
        wanted = normalize_name(name)
        if any(normalize_name(item.name) == wanted for item in self.list_categories()):
            raise ValidationError("Cette catégorie existe déjà.")
        if coach_id is not None:
            self.get_coach(coach_id)
        stored = self._create_entity(
            "categories", storage.serialize_entity(models.Category(id=0, name=name, coach_id=coach_id))
        )
        return storage.instantiate(models.Category, stored)

    def list_categories(self) -> List[models.Category]:
        categories = [storage.instantiate(models.Category, item) for item in self._list_entities("categories")]
        return sorted(categories, key=lambda item: collation_key(item.name))

    def remove_category(self, category_id: int) -> None:
        self._remove_entity("categories", category_id)

    def category_names(self) -> List[str]:
        names = list(config.PLAYER_CATEGORIES)
        for category in self.list_categories():
            if category.name not in names:
                names.append(category.name)
        return names

    # Players ---------------------------------------------------------
    def _validate_player(self, payload: Dict[str, Any]) -> None:
        if "status" in payload and payload["status"] not in models.PLAYER_STATUSES:
            raise ValidationError(f"Statut de joueur invalide: {payload['status']}")
        if "gender" in payload and payload["gender"] not in models.GENDERS:
            raise ValidationError(f"Genre invalide: {payload['gender']}")
        if "number" in payload and payload["number"] is not None:
            number = coerce_int(payload["number"])
            if number is None or number < 0:
                raise ValidationError("Numéro de maillot invalide.")
            payload["number"] = number
        if payload.get("coach_id") is not None:
            self.get_coach(int(payload["coach_id"]))

    def add_player(self, name: str, category: str, **details: Any) -> models.Player:
        name = self._check_name(name, "Le nom du joueur doit contenir au moins 2 caractères.")
        if not category:
            raise ValidationError("La catégorie est requise.")
        payload = self._person_payload(models.Player, details)
        self._validate_player(payload)
        payload.update({"name": name, "category": category})
        payload.setdefault("status", "Actif")
        stored = self._create_entity("players", payload)
        return storage.instantiate(models.Player, stored)

    def list_players(self) -> List[models.Player]:
        players = [storage.instantiate(models.Player, item) for item in self._list_entities("players")]
        return sorted(players, key=lambda player: collation_key(player.name))

    def get_player(self, player_id: int) -> models.Player:
        return storage.instantiate(models.Player, self._get_entity("players", player_id, "Joueur"))

    def update_player(self, player_id: int, **updates: Any) -> models.Player:
        payload = self._person_payload(models.Player, updates)
        if "name" in payload:
            payload["name"] = self._check_name(payload["name"], "Le nom du joueur doit contenir au moins 2 caractères.")
        self._validate_player(payload)
        record = self._update_entity("players", player_id, payload)
        return storage.instantiate(models.Player, record)

    def set_player_status(self, player_id: int, status: str) -> models.Player:
        return self.update_player(player_id, status=status)

    def remove_player(self, player_id: int) -> None:
        self._remove_entity("players", player_id)
        self._remove_owner_records(models.LEDGER_PAYMENT, player_id)

    def _remove_owner_records(self, kind: str, owner_id: int) -> None:
        key = LEDGER_COLLECTIONS[kind]
        collection = self._data.setdefault(key, [])
        kept = [item for item in collection if item.get("owner_id") != owner_id]
        if len(kept) != len(collection):
            self._data[key] = kept
            self._persist()
            logger.info("owner_records_removed", collection=key, owner_id=owner_id, count=len(collection) - len(kept))

    def search_players(self, term: str, field: str = "name") -> List[models.Player]:
        if field not in PLAYER_SEARCH_FIELDS:
            field = "name"
        return [player for player in self.list_players() if contains(getattr(player, field), term)]

    def players_by_category(self) -> List[Tuple[str, int]]:
        counts = Counter(player.category or "Sans catégorie" for player in self.list_players())
        return sorted(counts.items(), key=lambda item: collation_key(item[0]))

    # Coaches ---------------------------------------------------------
    def add_coach(self, name: str, category: str = "", **details: Any) -> models.Coach:
        name = self._check_name(name, "Le nom de l'entraîneur doit contenir au moins 2 caractères.")
        payload = self._person_payload(models.Coach, details)
        if payload.get("status", "Actif") not in models.COACH_STATUSES:
            raise ValidationError(f"Statut d'entraîneur invalide: {payload['status']}")
        payload.update({"name": name, "category": category})
        payload.setdefault("status", "Actif")
        stored = self._create_entity("coaches", payload)
        return storage.instantiate(models.Coach, stored)

    def list_coaches(self) -> List[models.Coach]:
        coaches = [storage.instantiate(models.Coach, item) for item in self._list_entities("coaches")]
        return sorted(coaches, key=lambda coach: collation_key(coach.name))

    def get_coach(self, coach_id: int) -> models.Coach:
        return storage.instantiate(models.Coach, self._get_entity("coaches", coach_id, "Entraîneur"))

    def update_coach(self, coach_id: int, **updates: Any) -> models.Coach:
        payload = self._person_payload(models.Coach, updates)
        if "name" in payload:
            payload["name"] = self._check_name(
                payload["name"], "Le nom de l'entraîneur doit contenir au moins 2 caractères."
            )
        if "status" in payload and payload["status"] not in models.COACH_STATUSES:
            raise ValidationError(f"Statut d'entraîneur invalide: {payload['status']}")
        record = self._update_entity("coaches", coach_id, payload)
        return storage.instantiate(models.Coach, record)

    def set_coach_status(self, coach_id: int, status: str) -> models.Coach:
        return self.update_coach(coach_id, status=status)

    def remove_coach(self, coach_id: int) -> None:
        self._remove_entity("coaches", coach_id)
        self._remove_owner_records(models.LEDGER_SALARY, coach_id)

    def search_coaches(self, term: str, field: str = "name") -> List[models.Coach]:
        if field not in COACH_SEARCH_FIELDS:
            field = "name"
        return [coach for coach in self.list_coaches() if contains(getattr(coach, field), term)]

    # Opponents -------------------------------------------------------
    def _check_opponent(self, name: str, logo_url: Optional[str], *, exclude_id: Optional[int] = None) -> str:
        name = self._check_name(name, "Le nom de l'équipe doit contenir au moins 2 caractères.")
        if logo_url and not logo_url.startswith(("http://", "https://")):
            raise ValidationError("Veuillez entrer une URL valide.")
        wanted = normalize_name(name)
        for opponent in self.list_opponents():
            if opponent.id != exclude_id and normalize_name(opponent.name) == wanted:
                raise ValidationError("Une équipe adverse avec ce nom existe déjà.")
        return name

    def add_opponent(self, name: str, logo_url: Optional[str] = None) -> models.Opponent:
        name = self._check_opponent(name, logo_url)
        stored = self._create_entity(
            "opponents", storage.serialize_entity(models.Opponent(id=0, name=name, logo_url=logo_url or None))
        )
        return storage.instantiate(models.Opponent, stored)

    def update_opponent(
        self, opponent_id: int, *, name: Optional[str] = None, logo_url: object | str | None = UNSET
    ) -> models.Opponent:
        current = self.get_opponent(opponent_id)
        new_logo = current.logo_url if logo_url is UNSET else (logo_url or None)
        updates: Dict[str, Any] = {
            "name": self._check_opponent(name or current.name, new_logo, exclude_id=opponent_id),
            "logo_url": new_logo,
        }
        record = self._update_entity("opponents", opponent_id, updates)
        return storage.instantiate(models.Opponent, record)

    def get_opponent(self, opponent_id: int) -> models.Opponent:
        return storage.instantiate(models.Opponent, self._get_entity("opponents", opponent_id, "Adversaire"))

    def list_opponents(self) -> List[models.Opponent]:
        opponents = [storage.instantiate(models.Opponent, item) for item in self._list_entities("opponents")]
        return sorted(opponents, key=lambda opponent: collation_key(opponent.name))

    def remove_opponent(self, opponent_id: int) -> None:
        used = [event for event in self.list_events() if event.opponent_id == opponent_id]
        if used:
            raise ValueError(f"Cet adversaire est utilisé par {len(used)} événement(s).")
        self._remove_entity("opponents", opponent_id)

    # Events ----------------------------------------------------------
    def _check_event(self, event_type: str, category: str, location: str, opponent_id: Optional[int]) -> None:
        if not event_type:
            raise ValidationError("Le type d'événement est requis.")
        if not category:
            raise ValidationError("L'équipe est requise.")
        if len((location or "").strip()) < 2:
            raise ValidationError("Le lieu est requis.")
        probe = models.Event(id=0, type=event_type, category=category, date=datetime.now())
        if probe.is_match:
            if opponent_id is None:
                raise ValidationError("L'adversaire est requis pour un match.")
            self.get_opponent(opponent_id)

    def add_event(
        self,
        event_type: str,
        category: str,
        when: datetime,
        location: str,
        opponent_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> models.Event:
        self._check_event(event_type, category, location, opponent_id)
        event = models.Event(
            id=0,
            type=event_type,
            category=category,
            date=when,
            location=location.strip(),
            opponent_id=opponent_id,
            notes=notes or None,
        )
        if not event.is_match:
            event.opponent_id = None
        stored = self._create_entity("events", storage.serialize_entity(event))
        return storage.instantiate(models.Event, stored)

    def list_events(self) -> List[models.Event]:
        events = [storage.instantiate(models.Event, item) for item in self._list_entities("events")]
        return sorted(events, key=lambda event: event.date)

    def get_event(self, event_id: int) -> models.Event:
        return storage.instantiate(models.Event, self._get_entity("events", event_id, "Événement"))

    def update_event(
        self,
        event_id: int,
        *,
        event_type: Optional[str] = None,
        category: Optional[str] = None,
        when: Optional[datetime] = None,
        location: Optional[str] = None,
        opponent_id: object | int | None = UNSET,
        notes: object | str | None = UNSET,
    ) -> models.Event:
        current = self.get_event(event_id)
        new_type = event_type or current.type
        new_category = category or current.category
        new_location = location if location is not None else current.location
        new_opponent = current.opponent_id if opponent_id is UNSET else opponent_id
        self._check_event(new_type, new_category, new_location, new_opponent)
        updates: Dict[str, Any] = {
            "type": new_type,
            "category": new_category,
            "location": new_location.strip(),
            "opponent_id": new_opponent,
        }
        if when is not None:
            updates["date"] = when.isoformat()
        if notes is not UNSET:
            updates["notes"] = notes or None
        record = self._update_entity("events", event_id, updates)
        return storage.instantiate(models.Event, record)

    def remove_event(self, event_id: int) -> None:
        self._remove_entity("events", event_id)

    def events_on(self, day: date) -> List[models.Event]:
        return [event for event in self.list_events() if event.date.date() == day]

    def upcoming_events(self, limit: int = 5, now: Optional[datetime] = None) -> List[models.Event]:
        now = now or datetime.now()
        return [event for event in self.list_events() if event.date >= now][:limit]

    def _opponent_names(self) -> Dict[int, str]:
        return {opponent.id: opponent.name for opponent in self.list_opponents()}

    def event_match_record(self, event: models.Event, *, opponent_names: Optional[Dict[int, str]] = None) -> models.MatchRecord:
        club = self.get_club()
        names = opponent_names if opponent_names is not None else self._opponent_names()
        opponent_name = names.get(event.opponent_id, "") if event.opponent_id is not None else ""
        opponent_id = opponent_team_id(event.opponent_id) if event.opponent_id is not None else None
        club_side = (club.name, CLUB_TEAM_ID)
        opponent_side = (opponent_name, opponent_id)
        home, away = (club_side, opponent_side) if is_home_location(event.location) else (opponent_side, club_side)
        return models.MatchRecord(
            id=event.id,
            category=event.category,
            kind=event.type,
            home_team=home[0],
            away_team=away[0],
            home_team_id=home[1],
            away_team_id=away[1],
            score_home=event.score_home,
            score_away=event.score_away,
        )

    def event_title(self, event: models.Event, *, opponent_names: Optional[Dict[int, str]] = None) -> str:
        club = self.get_club()
        if event.is_match:
            names = opponent_names if opponent_names is not None else self._opponent_names()
            opponent = names.get(event.opponent_id, "Adversaire inconnu")
            return f"{club.name} ({event.category}) vs {opponent}"
        return f"{event.type} - {club.name} ({event.category})"

    def event_statistics(self, event: models.Event) -> Optional[models.MatchStatistics]:
        if not event.is_match:
            return None
        match = self.event_match_record(event)
        return standings.match_statistics(
            match, event.scorers, event.assisters, club_is_home=is_home_location(event.location)
        )

    def _resolve_contributors(self, entries: Iterable[Dict[str, Any]], count_key: str) -> List[models.Contributor]:
        players = {player.id: player.name for player in self.list_players()}
        contributors: List[models.Contributor] = []
        for entry in entries or []:
            count = coerce_int(entry.get(count_key, entry.get("count")))
            if count is None or count < 1:
                continue
            player_id = coerce_int(entry.get("player_id"))
            if player_id is not None:
                name = players.get(player_id, "Joueur inconnu")
            else:
                name = (entry.get("player_name") or "").strip()
                if not name:
                    continue
            contributors.append(models.Contributor(player_name=name, count=count, player_id=player_id))
        return contributors

    def record_score(
        self,
        event_id: int,
        score_home: Any,
        score_away: Any,
        scorers: Iterable[Dict[str, Any]] = (),
        assisters: Iterable[Dict[str, Any]] = (),
    ) -> models.Event:
        event = self.get_event(event_id)
        if not event.is_match:
            raise ValidationError("Seuls les matchs peuvent recevoir un score.")
        home = coerce_int(score_home)
        away = coerce_int(score_away)
        if home is None or away is None or home < 0 or away < 0:
            raise ValidationError("Score invalide.")
        event.score_home = home
        event.score_away = away
        event.scorers = self._resolve_contributors(scorers, "goals")
        event.assisters = self._resolve_contributors(assisters, "assists")
        self.event_statistics(event)
        updates = {
            "score_home": home,
            "score_away": away,
            "scorers": [item.to_dict() for item in event.scorers],
            "assisters": [item.to_dict() for item in event.assisters],
        }
        record = self._update_entity("events", event_id, updates)
        logger.info("score_recorded", event_id=event_id, score_home=home, score_away=away)
        return storage.instantiate(models.Event, record)

    # Standings -------------------------------------------------------
    def standings(self, category: str, competition: str = config.DEFAULT_COMPETITION) -> models.StandingsTable:
        club = self.get_club()
        opponents = self.list_opponents()
        names = {opponent.id: opponent.name for opponent in opponents}
        logos = {opponent_team_id(opponent.id): opponent.logo_url for opponent in opponents}
        matches = [
            self.event_match_record(event, opponent_names=names)
            for event in self.list_events()
            if event.is_match and event.type == competition and event.category == category
        ]
        table = standings.compute_standings(
            category,
            club.name,
            matches,
            club_id=CLUB_TEAM_ID,
            club_logo_url=club.logo_url,
            opponents=logos,
        )
        if table.skipped:
            logger.debug("standings_skipped", category=category, count=len(table.skipped))
        return table

    # Ledgers ---------------------------------------------------------
    def _ledger_key(self, kind: str) -> str:
        try:
            return LEDGER_COLLECTIONS[kind]
        except KeyError:
            raise ValueError(f"Type de registre inconnu: {kind}") from None

    def _owner_lookup(self, kind: str) -> Dict[int, str]:
        return {int(item["id"]): item.get("name", "") for item in self._list_entities(LEDGER_OWNERS[kind])}

    def list_ledger(self, kind: str) -> List[models.LedgerRecord]:
        return [ledger_record_from(item) for item in self._list_entities(self._ledger_key(kind))]

    def get_ledger_record(self, kind: str, record_id: int) -> models.LedgerRecord:
        label = "Paiement" if kind == models.LEDGER_PAYMENT else "Salaire"
        return ledger_record_from(self._get_entity(self._ledger_key(kind), record_id, label))

    def _save_ledger_record(self, kind: str, record: models.LedgerRecord) -> models.LedgerRecord:
        ledger.validate_record(record)
        record.status = ledger.record_status(record)
        payload = storage.serialize_entity(record)
        stored = self._update_entity(self._ledger_key(kind), record.id, payload)
        return ledger_record_from(stored)

    def add_ledger_record(
        self,
        kind: str,
        owner_id: int,
        total_amount: Any,
        description: str,
        *,
        initial_amount: Any = None,
        method: str = "Espèces",
        overdue: bool = False,
        when: Optional[datetime] = None,
    ) -> models.LedgerRecord:
        key = self._ledger_key(kind)
        if owner_id not in self._owner_lookup(kind):
            raise ValidationError(f"{UNKNOWN_OWNER[kind]} (id {owner_id}).")
        total = coerce_amount(total_amount)
        if total is None or total <= 0:
            raise ValidationError("Le montant total doit être supérieur à 0.")
        description = (description or "").strip()
        if len(description) < 3:
            raise ValidationError("La description est requise.")
        initial = coerce_amount(initial_amount)
        transactions: List[models.Transaction] = []
        if initial:
            if initial > total:
                raise ValidationError("L'avance ne peut pas dépasser le montant total.")
            transactions.append(ledger.new_transaction(initial, method, when))
        record = models.LedgerRecord(
            id=0,
            owner_id=owner_id,
            description=description,
            total_amount=total,
            transactions=transactions,
            overdue=bool(overdue),
            created_at=when or datetime.now(),
            kind=kind,
        )
        ledger.validate_record(record)
        record.status = ledger.record_status(record)
        stored = self._create_entity(key, storage.serialize_entity(record))
        return ledger_record_from(stored)

    def add_ledger_transaction(
        self,
        kind: str,
        record_id: int,
        amount: Any,
        method: str = "Espèces",
        when: Optional[datetime] = None,
    ) -> models.LedgerRecord:
        record = self.get_ledger_record(kind, record_id)
        record.transactions.append(ledger.new_transaction(coerce_amount(amount), method, when))
        saved = self._save_ledger_record(kind, record)
        logger.info("ledger_transaction_added", kind=kind, record_id=record_id, amount=coerce_amount(amount))
        return saved

    def update_ledger_record(
        self,
        kind: str,
        record_id: int,
        *,
        owner_id: Optional[int] = None,
        total_amount: Any = None,
        description: Optional[str] = None,
    ) -> models.LedgerRecord:
        record = self.get_ledger_record(kind, record_id)
        if owner_id is not None:
            if owner_id not in self._owner_lookup(kind):
                raise ValidationError(f"{UNKNOWN_OWNER[kind]} (id {owner_id}).")
            record.owner_id = owner_id
        if total_amount is not None:
            total = coerce_amount(total_amount)
            if total is None or total <= 0:
                raise ValidationError("Le montant total doit être supérieur à 0.")
            record.total_amount = total
        if description is not None:
            if len(description.strip()) < 3:
                raise ValidationError("La description est requise.")
            record.description = description.strip()
        return self._save_ledger_record(kind, record)

    def set_ledger_overdue(self, kind: str, record_id: int, overdue: bool) -> models.LedgerRecord:
        record = self.get_ledger_record(kind, record_id)
        record.overdue = bool(overdue)
        if not overdue and record.status == models.STATUS_OVERDUE:
            record.status = None
        return self._save_ledger_record(kind, record)

    def remove_ledger_record(self, kind: str, record_id: int) -> None:
        self._remove_entity(self._ledger_key(kind), record_id)

    def ledger_report(self, kind: str) -> models.LedgerReport:
        report = ledger.aggregate_ledger(self.list_ledger(kind), self._owner_lookup(kind))
        if report.skipped:
            logger.info("ledger_records_skipped", kind=kind, count=len(report.skipped))
        return report

    def ledger_summary(self, kind: str, record_id: int) -> models.LedgerSummary:
        record = self.get_ledger_record(kind, record_id)
        owner_name = self._owner_lookup(kind).get(record.owner_id, UNKNOWN_OWNER[kind])
        return ledger.summarize_record(record, owner_name)

    def search_ledger(self, report: models.LedgerReport, term: str, field: str = "owner") -> List[models.LedgerSummary]:
        if field == "status":
            return [summary for summary in report.records if contains(summary.status, term)]
        return [summary for summary in report.records if contains(summary.owner_name, term)]

    def export_ledger_csv(self, kind: str) -> str:
        owner_label = "Joueur" if kind == models.LEDGER_PAYMENT else "Entraîneur"
        columns = [owner_label, "Description", "Montant Total", "Montant Payé", "Montant Restant", "Statut", "Date de Création"]
        rows = []
        for summary in self.ledger_report(kind).records:
            created = summary.record.created_at
            rows.append(
                [
                    summary.owner_name,
                    summary.record.description,
                    f"{summary.record.total_amount:.2f}",
                    f"{summary.amount_paid:.2f}",
                    f"{summary.amount_remaining:.2f}",
                    summary.status,
                    created.strftime("%Y-%m-%d %H:%M") if created else "",
                ]
            )
        frame = pd.DataFrame(rows, columns=columns)
        return "\ufeff" + frame.to_csv(sep=";", index=False, lineterminator="\n")

    # Payments and salaries -------------------------------------------
    def add_payment(self, player_id: int, total_amount: Any, description: str = config.DEFAULT_PAYMENT_DESCRIPTION, **options: Any) -> models.LedgerRecord:
        return self.add_ledger_record(models.LEDGER_PAYMENT, player_id, total_amount, description, **options)

    def add_payment_transaction(self, payment_id: int, amount: Any, method: str = "Espèces", when: Optional[datetime] = None) -> models.LedgerRecord:
        return self.add_ledger_transaction(models.LEDGER_PAYMENT, payment_id, amount, method, when)

    def update_payment(self, payment_id: int, **updates: Any) -> models.LedgerRecord:
        return self.update_ledger_record(models.LEDGER_PAYMENT, payment_id, **updates)

    def set_payment_overdue(self, payment_id: int, overdue: bool) -> models.LedgerRecord:
        return self.set_ledger_overdue(models.LEDGER_PAYMENT, payment_id, overdue)

    def remove_payment(self, payment_id: int) -> None:
        self.remove_ledger_record(models.LEDGER_PAYMENT, payment_id)

    def payment_report(self) -> models.LedgerReport:
        return self.ledger_report(models.LEDGER_PAYMENT)

    def get_payment_summary(self, payment_id: int) -> models.LedgerSummary:
        return self.ledger_summary(models.LEDGER_PAYMENT, payment_id)

    def add_salary(self, coach_id: int, total_amount: Any, description: Optional[str] = None, **options: Any) -> models.LedgerRecord:
        description = description or ledger.monthly_description(SALARY_PREFIX, options.get("when"))
        return self.add_ledger_record(models.LEDGER_SALARY, coach_id, total_amount, description, **options)

    def add_salary_transaction(self, salary_id: int, amount: Any, method: str = "Espèces", when: Optional[datetime] = None) -> models.LedgerRecord:
        return self.add_ledger_transaction(models.LEDGER_SALARY, salary_id, amount, method, when)

    def update_salary(self, salary_id: int, **updates: Any) -> models.LedgerRecord:
        return self.update_ledger_record(models.LEDGER_SALARY, salary_id, **updates)

    def set_salary_overdue(self, salary_id: int, overdue: bool) -> models.LedgerRecord:
        return self.set_ledger_overdue(models.LEDGER_SALARY, salary_id, overdue)

    def remove_salary(self, salary_id: int) -> None:
        self.remove_ledger_record(models.LEDGER_SALARY, salary_id)

    def salary_report(self) -> models.LedgerReport:
        return self.ledger_report(models.LEDGER_SALARY)

    def get_salary_summary(self, salary_id: int) -> models.LedgerSummary:
        return self.ledger_summary(models.LEDGER_SALARY, salary_id)

    def salary_eligible_coaches(self, on: Optional[date] = None) -> List[models.Coach]:
        """Coaches who have not yet been fully paid this month's salary."""
        description = ledger.monthly_description(SALARY_PREFIX, on)
        eligible = ledger.eligible_owners(
            self._owner_lookup(models.LEDGER_SALARY), self.list_ledger(models.LEDGER_SALARY), description
        )
        return [coach for coach in self.list_coaches() if coach.id in eligible]

    # Dashboard -------------------------------------------------------
    def month_revenue(self, on: Optional[date] = None) -> float:
        on = on or date.today()
        total = 0.0
        for record in self.list_ledger(models.LEDGER_PAYMENT):
            for transaction in record.transactions:
                if transaction.date.year == on.year and transaction.date.month == on.month:
                    total += transaction.amount
        return total

    def dashboard_summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        payments = self.payment_report()
        return {
            "players": len(self._list_entities("players")),
            "coaches": len(self._list_entities("coaches")),
            "month_revenue": round(self.month_revenue(now.date()), 2),
            "outstanding_payments": round(sum(owner.total_remaining for owner in payments.owners if owner.total_remaining > 0), 2),
            "upcoming_events": self.upcoming_events(5, now),
        }

    # Utility ---------------------------------------------------------
    def refresh(self) -> None:
        """Reload data from disk to reflect external changes."""
        self._data = storage.load_data()


def format_person(person: models.Person) -> str:
    return f"[{person.id}] {person.name} | {person.status} | {person.phone or '-'}"


def format_amount(value: float, currency: str = config.CURRENCY) -> str:
    formatted = f"{value:,.2f}".replace(",", " ").replace(".", ",")
    return f"{formatted} {currency}"


def format_ledger(summary: models.LedgerSummary) -> str:
    return (
        f"[{summary.id}] {summary.owner_name} | {summary.record.description} | "
        f"{format_amount(summary.record.total_amount)} | payé {format_amount(summary.amount_paid)} | "
        f"reste {format_amount(summary.amount_remaining)} | {summary.status}"
    )
