"""
Small helpers for working with in-memory record lists.
"""

import uuid
from typing import Any, Callable, Dict, List, NamedTuple, Optional


class Found(NamedTuple):
    """A record located in a collection, with its position."""

    index: int
    record: Dict[str, Any]


def find_record(
    records: List[Dict[str, Any]], predicate: Callable[[Dict[str, Any]], bool]
) -> Optional[Found]:
    """
    Linear scan for the first record matching predicate.

    Returns:
        Found: index and record, or None if nothing matched. Index 0 is a
        normal hit; callers check for None, not for a falsy index.
    """
    for index, record in enumerate(records):
        if predicate(record):
            return Found(index, record)
    return None


def find_by_id(records: List[Dict[str, Any]], record_id: str) -> Optional[Found]:
    return find_record(records, lambda r: r.get("id") == record_id)


def new_id() -> str:
    return str(uuid.uuid4())
