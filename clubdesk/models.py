"""Domain models for the club dashboard."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .errors import SkippedRecord

STATUS_PAID = "Payé"
STATUS_PARTIAL = "Partiel"
STATUS_PENDING = "En attente"
STATUS_OVERDUE = "En retard"
LEDGER_STATUSES = (STATUS_PAID, STATUS_PARTIAL, STATUS_PENDING, STATUS_OVERDUE)

LEDGER_PAYMENT = "payment"
LEDGER_SALARY = "salary"

PLAYER_STATUSES = ("Actif", "Inactif", "Blessé", "Suspendu")
COACH_STATUSES = ("Actif", "Inactif")
GENDERS = ("Masculin", "Féminin")


@dataclass
class Club:
    name: str = "Votre Club"
    address: Optional[str] = None
    contact_email: Optional[str] = None
    logo_url: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Category:
    id: int
    name: str
    coach_id: Optional[int] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Person:
    """Base entity for players and coaches."""

    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    nationality: Optional[str] = None
    cin: Optional[str] = None
    address: Optional[str] = None
    entry_date: Optional[date] = None
    exit_date: Optional[date] = None
    status: str = "Actif"

    def to_dict(self) -> Dict:
        return asdict(self)

    @property
    def initial(self) -> str:
        return (self.name or "?")[:1].upper()


@dataclass
class Player(Person):
    category: str = ""
    gender: str = "Masculin"
    number: Optional[int] = None
    position: Optional[str] = None
    birth_date: Optional[date] = None
    coach_id: Optional[int] = None
    tutor_name: Optional[str] = None
    tutor_cin: Optional[str] = None
    tutor_phone: Optional[str] = None
    tutor_email: Optional[str] = None


@dataclass
class Coach(Person):
    category: str = ""
    specialty: Optional[str] = None


@dataclass
class Opponent:
    id: int
    name: str
    logo_url: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Contributor:
    """A goal scorer or assister. ``player_id`` is empty for opposing players."""

    player_name: str
    count: int = 1
    player_id: Optional[int] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Event:
    id: int
    type: str
    category: str
    date: datetime
    location: str = ""
    opponent_id: Optional[int] = None
    score_home: Optional[int] = None
    score_away: Optional[int] = None
    scorers: List[Contributor] = field(default_factory=list)
    assisters: List[Contributor] = field(default_factory=list)
    notes: Optional[str] = None

    @property
    def is_match(self) -> bool:
        return "Match" in self.type or "Tournoi" in self.type

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Transaction:
    amount: float
    date: datetime
    method: str = "Espèces"

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class LedgerRecord:
    """A payment owed by a player or a salary owed to a coach."""

    id: int
    owner_id: Optional[int]
    description: str
    total_amount: float
    transactions: List[Transaction] = field(default_factory=list)
    # Last status written by the dashboard; a cache, recomputed on every read.
    status: Optional[str] = None
    overdue: bool = False
    created_at: Optional[datetime] = None
    kind: str = LEDGER_PAYMENT

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class LedgerSummary:
    record: LedgerRecord
    owner_name: str
    amount_paid: float
    amount_remaining: float
    status: str

    @property
    def outstanding(self) -> float:
        """Remaining amount, never below zero."""
        return max(self.amount_remaining, 0.0)

    @property
    def id(self) -> int:
        return self.record.id


@dataclass
class OwnerLedger:
    owner_id: int
    owner_name: str
    total_due: float = 0.0
    total_paid: float = 0.0
    total_remaining: float = 0.0
    overall_status: str = STATUS_PENDING
    records: List[LedgerSummary] = field(default_factory=list)


@dataclass
class LedgerReport:
    records: List[LedgerSummary] = field(default_factory=list)
    owners: List[OwnerLedger] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)


@dataclass
class MatchRecord:
    """A match as seen by the standings calculator."""

    id: Any
    category: str
    home_team: str
    away_team: str
    score_home: Optional[int] = None
    score_away: Optional[int] = None
    kind: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None


@dataclass
class TeamStats:
    team_id: str
    name: str
    logo_url: Optional[str] = None
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass
class StandingsTable:
    category: str
    rows: List[TeamStats] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)


@dataclass
class MatchSide:
    team: str
    score: Optional[int]
    scorers: List[Contributor] = field(default_factory=list)
    assisters: List[Contributor] = field(default_factory=list)

    @property
    def attributed_goals(self) -> int:
        return sum(item.count for item in self.scorers)


@dataclass
class MatchStatistics:
    home: MatchSide
    away: MatchSide
    result: str


EntityType = Dict[str, List[Dict]]
