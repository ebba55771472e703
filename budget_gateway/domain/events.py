"""Ledger event parsing with partial-failure tolerance.

The ledger is append-heavy and user-editable, so a single bad record must
never abort a computation: malformed events are dropped and reported as
warnings instead.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Tuple, Union

from budget_gateway.domain.exceptions import InvalidTransactionDataError
from budget_gateway.domain.models import EVENT_TYPES, TransactionEvent
from budget_gateway.utils.date_utils import parse_iso_date
from budget_gateway.utils.money import to_decimal

logger = logging.getLogger(__name__)

RawEvent = Union[TransactionEvent, Mapping[str, Any]]


def event_from_mapping(raw: Mapping[str, Any]) -> TransactionEvent:
    """
    Build a TransactionEvent from a ledger record.

    Accepts both snake_case keys and the ledger's camelCase spelling
    (isProjected, isRecurring, sourceId).

    Raises:
        InvalidTransactionDataError: missing field, unparseable date/amount,
            unknown type, or negative amount
    """
    if not isinstance(raw, Mapping):
        raise InvalidTransactionDataError(f"Expected a ledger record, got {type(raw).__name__}")
    source_id = str(raw.get("source_id", raw.get("sourceId", raw.get("item_id", ""))))
    try:
        event_date = parse_iso_date(raw["date"])
        amount = to_decimal(raw["amount"])
        event_type = str(raw["type"]).lower()
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidTransactionDataError(f"Event {source_id or '?'}: {e}") from e

    event = TransactionEvent(
        date=event_date,
        type=event_type,
        amount=amount,
        category=str(raw.get("category") or "uncategorized"),
        is_projected=bool(raw.get("is_projected", raw.get("isProjected", False))),
        is_recurring=bool(raw.get("is_recurring", raw.get("isRecurring", False))),
        source_id=source_id,
        description=str(raw.get("description") or ""),
    )
    check_event(event)
    return event


def normalize_event(event: TransactionEvent) -> TransactionEvent:
    """
    Coerce a typed event built by a caller: ISO strings and datetimes become
    dates, ints and numeric strings become Decimals.

    Raises:
        InvalidTransactionDataError: date or amount cannot be coerced, or the
            coerced event fails check_event
    """
    try:
        event_date = parse_iso_date(event.date)
        amount = to_decimal(event.amount)
    except (ValueError, TypeError) as e:
        raise InvalidTransactionDataError(f"Event {event.source_id}: {e}") from e

    if type(event.date) is not date or not isinstance(event.amount, Decimal):
        event = replace(event, date=event_date, amount=amount)
    check_event(event)
    return event


def check_event(event: TransactionEvent) -> None:
    """Reject events a typed caller could still construct with bad values"""
    if event.type not in EVENT_TYPES:
        raise InvalidTransactionDataError(f"Event {event.source_id}: unknown type {event.type!r}")
    if not event.amount.is_finite():
        raise InvalidTransactionDataError(f"Event {event.source_id}: amount is not a finite number")
    if event.amount < 0:
        raise InvalidTransactionDataError(
            f"Event {event.source_id}: negative amount {event.amount} where a magnitude is expected"
        )


def parse_events(raw_events: Iterable[RawEvent]) -> Tuple[List[TransactionEvent], List[str]]:
    """
    Validate a batch of ledger records.

    Returns:
        (usable events, warnings for every dropped record)
    """
    events: List[TransactionEvent] = []
    warnings: List[str] = []

    for raw in raw_events:
        try:
            if isinstance(raw, TransactionEvent):
                events.append(normalize_event(raw))
            else:
                events.append(event_from_mapping(raw))
        except InvalidTransactionDataError as e:
            message = f"Dropped malformed event: {e}"
            logger.warning(message)
            warnings.append(message)

    return events, warnings
