# ==============================================================================
# QUERY COMPILER - Mapping Payloads to SQLAlchemy Clauses
# ==============================================================================
# Translates where / select / order_by / update payloads into
# SQLAlchemy expressions for one mapped model
# ==============================================================================

"""
Query payloads
==============

``where`` is a mapping keyed by model attribute name::

    {"email": "a@example.com"}                    # equality
    {"folder_id": None}                           # IS NULL
    {"size": {"gte": 1024, "lt": 4096}}           # operators, ANDed
    {"name": {"contains": "report"}}
    {"OR": [{"is_deleted": True}, {"size": 0}]}   # AND / OR / NOT
    {"NOT": [{"size": 0}, {"name": "a"}]}         # none of the listed filters

Operators: ``equals``, ``not``, ``in``, ``not_in``, ``lt``, ``lte``, ``gt``,
``gte``, ``contains``, ``starts_with``, ``ends_with``. The camelCase
spellings ``notIn``, ``startsWith`` and ``endsWith`` are accepted too.

Update payloads take plain values or one of ``set``, ``increment``,
``decrement``, ``multiply``, ``divide``::

    {"storage_used": {"increment": 2048}}
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Integer, UniqueConstraint, and_, false, inspect as sa_inspect, not_, or_
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from filevault.core.exceptions import InvalidQueryError
from filevault.database.tables import Table

LOGICAL_KEYS = ("AND", "OR", "NOT")

_FILTER_OPERATORS: Dict[str, Callable[[Any, Any], ColumnElement]] = {
    "equals": lambda column, value: column.is_(None) if value is None else column == value,
    "in": lambda column, value: column.in_(list(value)),
    "not_in": lambda column, value: column.not_in(list(value)),
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "contains": lambda column, value: column.contains(value, autoescape=True),
    "starts_with": lambda column, value: column.startswith(value, autoescape=True),
    "ends_with": lambda column, value: column.endswith(value, autoescape=True),
}

_OPERATOR_ALIASES = {
    "notIn": "not_in",
    "startsWith": "starts_with",
    "endsWith": "ends_with",
}

_UPDATE_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "increment": operator.add,
    "decrement": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
}


def column_for(table: Table, field: str) -> InstrumentedAttribute:
    """Return the mapped column attribute ``field`` of ``table``."""
    mapper = sa_inspect(table.model)
    if not isinstance(field, str) or field not in mapper.column_attrs:
        raise InvalidQueryError(
            message=f"Unknown field '{field}' for {table.value}",
            table=table.value,
            field=str(field),
        )
    return getattr(table.model, field)


# ==============================================================================
# WHERE
# ==============================================================================

def compile_where(
    table: Table,
    where: Optional[Mapping[str, Any]],
) -> Optional[ColumnElement]:
    """
    Compile a ``where`` mapping into a single boolean clause.

    Returns:
        Clause, or None when the mapping places no restriction
    """
    if not where:
        return None
    if not isinstance(where, Mapping):
        raise InvalidQueryError(
            message=f"where must be a mapping, got {type(where).__name__}",
            table=table.value,
        )

    conditions: List[ColumnElement] = []
    for key, value in where.items():
        if key in LOGICAL_KEYS:
            clause = _compile_logical(table, key, value)
        else:
            clause = _compile_field(table, column_for(table, key), key, value)
        if clause is not None:
            conditions.append(clause)

    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return and_(*conditions)


def _compile_logical(table: Table, key: str, value: Any) -> Optional[ColumnElement]:
    items = value if isinstance(value, (list, tuple)) else [value]
    clauses = [
        clause
        for clause in (compile_where(table, item) for item in items)
        if clause is not None
    ]

    if key == "OR":
        # An empty OR matches nothing
        return or_(*clauses) if clauses else false()
    if not clauses:
        return None
    if key == "NOT":
        # Each listed filter must fail on its own
        negated = [not_(clause) for clause in clauses]
        return and_(*negated) if len(negated) > 1 else negated[0]
    return and_(*clauses) if len(clauses) > 1 else clauses[0]


def _compile_field(
    table: Table,
    column: InstrumentedAttribute,
    field: str,
    value: Any,
) -> Optional[ColumnElement]:
    if not isinstance(value, Mapping):
        _require_scalar(table, field, value)
        return column.is_(None) if value is None else column == value

    conditions: List[ColumnElement] = []
    for raw_op, operand in value.items():
        op = _OPERATOR_ALIASES.get(raw_op, raw_op)
        if op == "not":
            inner = _compile_field(table, column, field, operand)
            if inner is not None:
                conditions.append(not_(inner))
            continue
        handler = _FILTER_OPERATORS.get(op)
        if handler is None:
            raise InvalidQueryError(
                message=f"Unknown filter operator '{raw_op}' on {table.value}.{field}",
                table=table.value,
                field=field,
            )
        if op == "equals":
            _require_scalar(table, field, operand)
        conditions.append(handler(column, operand))

    if not conditions:
        return None
    return and_(*conditions) if len(conditions) > 1 else conditions[0]


def _require_scalar(table: Table, field: str, value: Any) -> None:
    if isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidQueryError(
            message=(
                f"{table.value}.{field} compares against a single value; "
                f"use {{'in': [...]}} to match any of several"
            ),
            table=table.value,
            field=field,
        )


def equality_fields(where: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Top-level fields of ``where`` pinned to a single non-null value.

    ``{"email": "x"}`` and ``{"email": {"equals": "x"}}`` both pin ``email``.
    """
    pinned: Dict[str, Any] = {}
    for key, value in (where or {}).items():
        if key in LOGICAL_KEYS:
            continue
        if isinstance(value, Mapping):
            if set(value) != {"equals"}:
                continue
            value = value["equals"]
        if value is not None:
            pinned[key] = value
    return pinned


def unique_key_sets(table: Table) -> List[Tuple[str, ...]]:
    """Attribute-name tuples that identify a single row of ``table``."""
    mapper = sa_inspect(table.model)
    by_column = {prop.columns[0].name: prop.key for prop in mapper.column_attrs}

    key_sets: List[Tuple[str, ...]] = [
        tuple(by_column[column.name] for column in mapper.primary_key)
    ]
    for column in table.model.__table__.columns:
        if column.unique and not column.primary_key:
            key_sets.append((by_column[column.name],))
    for constraint in table.model.__table__.constraints:
        if isinstance(constraint, UniqueConstraint):
            key_sets.append(tuple(by_column[column.name] for column in constraint.columns))
    return key_sets


def require_unique_where(table: Table, where: Optional[Mapping[str, Any]]) -> None:
    """
    Reject filters that cannot identify at least one unique row.

    Raises:
        InvalidQueryError: If no unique key is fully pinned by ``where``
    """
    pinned = equality_fields(where)
    key_sets = unique_key_sets(table)
    if any(all(field in pinned for field in key_set) for key_set in key_sets):
        return

    options = ", ".join("+".join(key_set) for key_set in key_sets)
    raise InvalidQueryError(
        message=(
            f"{table.value} lookup requires a unique filter on one of: {options}"
        ),
        table=table.value,
    )


# ==============================================================================
# SELECT / ORDER BY
# ==============================================================================

def compile_select(
    table: Table,
    select: Optional[Mapping[str, bool]],
) -> Optional[List[InstrumentedAttribute]]:
    """
    Columns chosen by a ``{field: bool}`` projection.

    Returns:
        Selected columns, or None when no projection was requested
    """
    if select is None:
        return None
    columns = [column_for(table, field) for field, wanted in select.items() if wanted]
    if not columns:
        raise InvalidQueryError(
            message=f"select on {table.value} must include at least one field",
            table=table.value,
        )
    return columns


def compile_order_by(
    table: Table,
    order_by: Optional[Any],
) -> List[ColumnElement]:
    """
    Compile ``{field: "asc"|"desc"}`` or a list of such mappings.
    """
    if not order_by:
        return []
    entries: Iterable[Mapping[str, str]] = (
        order_by if isinstance(order_by, (list, tuple)) else [order_by]
    )

    clauses: List[ColumnElement] = []
    for entry in entries:
        for field, direction in entry.items():
            column = column_for(table, field)
            direction = str(direction).lower()
            if direction == "asc":
                clauses.append(column.asc())
            elif direction == "desc":
                clauses.append(column.desc())
            else:
                raise InvalidQueryError(
                    message=f"Sort direction for {table.value}.{field} must be 'asc' or 'desc'",
                    table=table.value,
                    field=field,
                )
    return clauses


# ==============================================================================
# PAYLOADS
# ==============================================================================

def check_create_payload(table: Table, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate the field names of a record to insert."""
    if not isinstance(data, Mapping):
        raise InvalidQueryError(
            message=f"{table.value} record must be a mapping, got {type(data).__name__}",
            table=table.value,
        )
    for field, value in data.items():
        column_for(table, field)
        if isinstance(value, Mapping):
            raise InvalidQueryError(
                message=f"Operators are not allowed when creating {table.value}.{field}",
                table=table.value,
                field=field,
            )
    return dict(data)


def compile_update_values(table: Table, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Resolve an update payload into ``{attribute: value_or_expression}``.

    Atomic operators become SQL expressions over the current column value,
    so they are applied by the database.
    """
    if not isinstance(data, Mapping):
        raise InvalidQueryError(
            message=f"{table.value} update data must be a mapping",
            table=table.value,
        )

    values: Dict[str, Any] = {}
    for field, value in data.items():
        column = column_for(table, field)
        if not isinstance(value, Mapping):
            values[field] = value
            continue
        if len(value) != 1:
            raise InvalidQueryError(
                message=f"Update of {table.value}.{field} takes exactly one operator",
                table=table.value,
                field=field,
            )
        op, operand = next(iter(value.items()))
        if op == "set":
            values[field] = operand
        elif op == "divide" and isinstance(column.type, Integer):
            values[field] = column // operand
        elif op in _UPDATE_OPERATORS:
            values[field] = _UPDATE_OPERATORS[op](column, operand)
        else:
            raise InvalidQueryError(
                message=f"Unknown update operator '{op}' on {table.value}.{field}",
                table=table.value,
                field=field,
            )
    return values


def group_rows(rows: Sequence[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
    """
    Split rows into consecutive runs sharing the same key set.

    A multi-row INSERT needs every row to name the same columns.
    """
    groups: List[List[Dict[str, Any]]] = []
    last_keys: Optional[frozenset] = None
    for row in rows:
        keys = frozenset(row)
        if keys != last_keys:
            groups.append([])
            last_keys = keys
        groups[-1].append(row)
    return groups
