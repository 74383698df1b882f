"""
Date filtering of raw upstream records.

Upstream date fields arrive as "YYYY-MM-DD", as "YYYY-MM-DDTHH:MM:SS" with an
optional offset, or not at all. Filtering compares only the date prefix
(everything before the first "T") against the target date with plain string
equality. A record whose field is missing, null or empty never matches.

Records are never modified; the filters return new lists holding the same
dict objects.
"""

from typing import Any, Callable, Collection, Iterable, List, Optional

from opsreport.models.schemas import Record


FieldSelector = Callable[[Record], Any]


def field_selector(name: str) -> FieldSelector:
    """Selector reading one top-level field of a record."""
    def select(record: Record) -> Any:
        return record.get(name)
    select.__name__ = f"select_{name}"
    return select


def date_prefix(value: Any) -> Optional[str]:
    """
    Date-only part of an upstream date value.

    >>> date_prefix("2024-05-01T13:22:00-03:00")
    '2024-05-01'
    >>> date_prefix(None) is None
    True
    """
    if value is None:
        return None
    text = str(value)
    if not text:
        return None
    return text.split("T", 1)[0]


def filter_by_date(
    target_date: str,
    records: Iterable[Record],
    selector: FieldSelector,
) -> List[Record]:
    """
    Keep records whose selected date falls on `target_date`.

    Args:
        target_date: "YYYY-MM-DD".
        records: Raw upstream records.
        selector: Returns the date value to compare for a record.

    Returns:
        Matching records in their original order.
    """
    return [
        record for record in records
        if date_prefix(selector(record)) == target_date
    ]


def filter_by_dates(
    target_dates: Collection[str],
    records: Iterable[Record],
    selector: FieldSelector,
) -> List[Record]:
    """Keep records whose selected date is one of `target_dates`."""
    wanted = set(target_dates)
    matched = []
    for record in records:
        prefix = date_prefix(selector(record))
        if prefix is not None and prefix in wanted:
            matched.append(record)
    return matched
