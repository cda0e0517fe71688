"""Payment and salary ledger aggregation.

A ledger record holds an amount due and the transactions paid against it.
Everything shown on the payments and salaries pages (amount paid, amount
remaining, the status badge and the per-owner rollup) is recomputed here from
the raw records on every read; the ``status`` stored on a record is only a
cache of the last value the dashboard wrote.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, Mapping, Optional

import structlog

from . import models
from .errors import SkippedRecord, ValidationError
from .normalize import collation_key, normalize_key

logger = structlog.get_logger(__name__)

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def amount_paid(record: models.LedgerRecord) -> float:
    return sum(transaction.amount for transaction in record.transactions or [])


def amount_remaining(record: models.LedgerRecord) -> float:
    # Overpayment is kept as a negative value; LedgerSummary.outstanding clamps it.
    return record.total_amount - amount_paid(record)


def derive_status(total: float, paid: float, *, overdue: bool = False) -> str:
    """Status label for an amount due and the amount paid against it.

    ``En retard`` is never derived from the figures; it only replaces the
    unpaid states when the record carries the manual overdue flag.
    """
    remaining = total - paid
    if remaining <= 0:
        return models.STATUS_PAID
    if overdue:
        return models.STATUS_OVERDUE
    if paid == 0:
        return models.STATUS_PENDING
    return models.STATUS_PARTIAL


def is_overdue(record: models.LedgerRecord) -> bool:
    return bool(record.overdue) or record.status == models.STATUS_OVERDUE


def record_status(record: models.LedgerRecord) -> str:
    return derive_status(record.total_amount, amount_paid(record), overdue=is_overdue(record))


def validate_record(record: models.LedgerRecord) -> None:
    if record.owner_id in (None, ""):
        raise ValidationError(f"L'enregistrement {record.id} n'a pas de titulaire.")
    if record.total_amount is None or record.total_amount < 0:
        raise ValidationError(f"Le montant total de l'enregistrement {record.id} ne peut pas être négatif.")
    for transaction in record.transactions or []:
        if transaction.amount is None or transaction.amount <= 0:
            raise ValidationError(f"Les versements de l'enregistrement {record.id} doivent être positifs.")


def summarize_record(record: models.LedgerRecord, owner_name: str) -> models.LedgerSummary:
    paid = amount_paid(record)
    return models.LedgerSummary(
        record=record,
        owner_name=owner_name,
        amount_paid=paid,
        amount_remaining=record.total_amount - paid,
        status=derive_status(record.total_amount, paid, overdue=is_overdue(record)),
    )


def _newest_first(summary: models.LedgerSummary):
    created = summary.record.created_at
    return created.timestamp() if created is not None else float("-inf")


def aggregate_ledger(
    records: Iterable[models.LedgerRecord],
    owners: Mapping[int, str],
) -> models.LedgerReport:
    """Summarize each record and roll the figures up per owner.

    Records whose owner is not in ``owners`` or that fail validation are
    returned in ``skipped``; the remaining records are still aggregated.
    """
    report = models.LedgerReport()
    groups: Dict[int, models.OwnerLedger] = {}

    for record in records:
        try:
            validate_record(record)
        except ValidationError as exc:
            logger.warning("ledger_record_skipped", record_id=record.id, reason="invalid", detail=str(exc))
            report.skipped.append(SkippedRecord(record.id, "invalid", str(exc)))
            continue
        owner_name = owners.get(record.owner_id)
        if owner_name is None:
            logger.info("ledger_record_skipped", record_id=record.id, reason="unknown_owner", owner_id=record.owner_id)
            report.skipped.append(SkippedRecord(record.id, "unknown_owner", f"titulaire {record.owner_id}"))
            continue

        summary = summarize_record(record, owner_name)
        report.records.append(summary)

        group = groups.get(record.owner_id)
        if group is None:
            group = groups[record.owner_id] = models.OwnerLedger(owner_id=record.owner_id, owner_name=owner_name)
        group.total_due += record.total_amount
        group.total_paid += summary.amount_paid
        group.records.append(summary)

    for group in groups.values():
        group.total_remaining = group.total_due - group.total_paid
        group.overall_status = derive_status(group.total_due, group.total_paid)
        group.records.sort(key=_newest_first, reverse=True)

    report.owners = sorted(groups.values(), key=lambda group: (collation_key(group.owner_name), group.owner_id))
    report.records.sort(key=_newest_first, reverse=True)
    return report


def normalize_description(text: Optional[str]) -> str:
    return normalize_key(text)


def is_fully_paid(record: models.LedgerRecord) -> bool:
    return amount_paid(record) >= (record.total_amount or 0)


def has_paid_record(records: Iterable[models.LedgerRecord], owner_id: int, description: str) -> bool:
    """True when the owner already settled a record with the same description."""
    wanted = normalize_description(description)
    for record in records:
        if record.owner_id != owner_id:
            continue
        if normalize_description(record.description) == wanted and is_fully_paid(record):
            return True
    return False


def eligible_owners(
    owners: Mapping[int, str],
    records: Iterable[models.LedgerRecord],
    description: str,
) -> Dict[int, str]:
    records = list(records)
    return {
        owner_id: name
        for owner_id, name in owners.items()
        if not has_paid_record(records, owner_id, description)
    }


def monthly_description(prefix: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"{prefix} {FRENCH_MONTHS[on.month - 1]} {on.year}"


def new_transaction(amount: float, method: str, when: Optional[datetime] = None) -> models.Transaction:
    if amount is None or amount <= 0:
        raise ValidationError("Le montant du versement doit être supérieur à 0.")
    return models.Transaction(amount=float(amount), date=when or datetime.now(), method=method)
