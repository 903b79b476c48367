"""
Query-string filter translation.

Turns flat query parameters of the form ``field[op]=value`` into a MongoDB
filter document. Supported operators: eq, neq, gt, gte, lt, lte, like,
ilike, in. The functions here are pure and never raise on bad input.
"""
import math
import re
from typing import Any, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId

RESERVED_KEYS = frozenset({"select", "order", "limit"})

OPERATORS = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike", "in"})

PRIMARY_KEY = "_id"

_KEY_PATTERN = re.compile(r"^(.+)\[(.+)\]$")

_RANGE_OPERATORS = {
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
}


def is_identifier_field(field: str) -> bool:
    """Return True for fields that hold document identifiers."""
    return field == "id" or field.endswith("_id")


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Parse a 24-character hex identifier, or return None."""
    if not isinstance(value, str) or len(value) != 24:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def parse_number(value: str) -> Any:
    """
    Parse a relational operand as a float.

    Falls back to the raw string when the value is not a finite number, so
    relational operators on text fields still produce a (string) comparison.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    if not math.isfinite(number):
        return value
    return number


def _identifier_clause(operator: str, object_id: ObjectId) -> Optional[Any]:
    if operator == "eq":
        return object_id
    if operator == "neq":
        return {"$ne": object_id}
    return None


def _identifier_list(raw: str) -> dict:
    # Each element is parsed on its own; unparseable ones stay strings
    return {"$in": [parse_object_id(item) or item for item in raw.split(",")]}


def _generic_clause(operator: str, value: str) -> Optional[Any]:
    if operator == "eq":
        return value
    if operator == "neq":
        return {"$ne": value}
    if operator in _RANGE_OPERATORS:
        return {_RANGE_OPERATORS[operator]: parse_number(value)}
    if operator == "like":
        return {"$regex": value}
    if operator == "ilike":
        return {"$regex": value, "$options": "i"}
    if operator == "in":
        return {"$in": value.split(",")}
    return None


def _is_operator_document(clause: Any) -> bool:
    return isinstance(clause, dict) and bool(clause) and all(
        key.startswith("$") for key in clause
    )


def _merge_clause(filter_doc: dict, field: str, clause: Any) -> None:
    existing = filter_doc.get(field)
    if _is_operator_document(existing) and _is_operator_document(clause):
        # price[gte]=1&price[lte]=2 -> {"price": {"$gte": 1, "$lte": 2}}
        existing.update(clause)
    else:
        filter_doc[field] = clause


def build_filter(params: Mapping[str, Any]) -> dict:
    """
    Build a MongoDB filter from ``field[op]=value`` query parameters.

    Identifier fields (``id``, ``_id`` and anything ending in ``_id``) whose
    value parses as an ObjectId are matched as ObjectIds, with ``id``
    rewritten to the primary key. Only eq, neq and in apply to a parsed
    identifier; ``in`` parses each comma-separated element on its own.
    Values that do not parse fall back to plain string handling. Unknown
    operators and keys without brackets are ignored.

    Args:
        params: Flat mapping of query parameter names to string values

    Returns:
        Filter document for ``Collection.find`` and friends
    """
    filter_doc: dict = {}

    for key, value in params.items():
        if key in RESERVED_KEYS:
            continue

        match = _KEY_PATTERN.match(key)
        if not match:
            continue

        field, operator = match.group(1), match.group(2)
        if operator not in OPERATORS:
            continue
        value = "" if value is None else str(value)

        if is_identifier_field(field):
            store_field = PRIMARY_KEY if field == "id" else field
            if operator == "in":
                _merge_clause(filter_doc, store_field, _identifier_list(value))
                continue
            object_id = parse_object_id(value)
            if object_id is not None:
                clause = _identifier_clause(operator, object_id)
                if clause is not None:
                    _merge_clause(filter_doc, store_field, clause)
                continue

        clause = _generic_clause(operator, value)
        if clause is not None:
            _merge_clause(filter_doc, field, clause)

    return filter_doc


def parse_sort(order: Optional[str]) -> Optional[tuple[str, int]]:
    """
    Parse an ``order`` parameter such as ``price.desc``.

    Direction defaults to ascending. Sorting on ``id`` sorts on the
    primary key.
    """
    if not order:
        return None
    field, _, direction = order.partition(".")
    if not field:
        return None
    if field == "id":
        field = PRIMARY_KEY
    return field, -1 if direction == "desc" else 1


def parse_limit(limit: Any) -> Optional[int]:
    """Parse a ``limit`` parameter; non-positive or invalid limits are ignored."""
    if limit is None or limit == "":
        return None
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None
