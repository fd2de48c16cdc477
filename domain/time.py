"""
Domain time utilities (pure).

Billing providers report instants as integer epoch milliseconds. The ledger
works in UTC calendar days, so conversions are centralized here and behave the
same everywhere in the domain model.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Last millisecond representable as a datetime (9999-12-31T23:59:59.999Z)
MAX_EPOCH_MILLIS = 253_402_300_799_999


def utc_datetime_from_epoch_millis(epoch_millis: int) -> datetime:
    """Convert epoch milliseconds into a timezone-aware UTC datetime."""

    return _EPOCH + timedelta(milliseconds=epoch_millis)


def utc_date_from_epoch_millis(epoch_millis: int) -> date:
    """
    Truncate an epoch-milliseconds instant to its UTC calendar day.

    Example:
        utc_date_from_epoch_millis(1735775999999)  # date(2025, 1, 1)
    """

    return utc_datetime_from_epoch_millis(epoch_millis).date()
