"""Small helpers that assemble raw SQL fragments: fields, joins and conditions."""

from __future__ import annotations

import math
from collections.abc import Callable
from decimal import Decimal

Join = Callable[[], str]
ConditionPrepare = Callable[[], str]

__all__ = [
    "ConditionPrepare",
    "Join",
    "and_",
    "between",
    "condition",
    "field",
    "if_",
    "in_",
    "inner_join",
    "is_null",
    "is_null_condition",
    "joins",
    "left_join",
    "like",
    "not_in",
    "or_",
    "perd",
    "raw",
    "right_join",
]


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"Cannot render non-finite number {value!r}")
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _convert_string(value: object) -> str:
    """Render a scalar value as SQL text; only ints, floats and strings are accepted."""
    if isinstance(value, bool):
        raise TypeError("Unsupported types")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    raise TypeError("Unsupported types")


def _convert_slice_string(values: object) -> list[str]:
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise TypeError("Unsupported types")
    return [_convert_string(value) for value in values]


def _quote_column(column: str) -> str:
    stripped = column.replace("`", "")
    parts = stripped.split(".")
    if len(parts) >= 2:
        return f"`{parts[0]}`.`{parts[1]}`"
    return f"`{stripped}`"


def field(*fields: str) -> str:
    """Join field names with commas, quoting ``table.column`` pairs."""
    if not fields:
        raise ValueError("Fields Can Not Be Empty")
    rendered = []
    for name in fields:
        parts = name.replace("`", "").split(".")
        if len(parts) >= 2:
            rendered.append(f"`{parts[0]}`.`{parts[1]}`")
        else:
            rendered.append(parts[0])
    return ",".join(rendered)


def is_null(column: str) -> str:
    """The ``isnull()`` SQL function applied to a column."""
    return "isnull(`" + column + "`)"


def if_(expr1: str, expr2: str, expr3: str) -> str:
    """The ``if()`` SQL function."""
    return "if(" + expr1 + "," + expr2 + "," + expr3 + ")"


def joins(*join_clauses: Join) -> str:
    """Render join clauses separated by spaces."""
    if not join_clauses:
        raise ValueError("Joins Can Not Be Empty")
    return " ".join(join() for join in join_clauses)


def _join(kind: str, table: str, first: str, operator: str, second: str) -> Join:
    return lambda: f"{kind} JOIN {table} ON {first}{operator}{second}"


def left_join(table: str, first: str, operator: str, second: str) -> Join:
    return _join("LEFT", table, first, operator, second)


def right_join(table: str, first: str, operator: str, second: str) -> Join:
    return _join("RIGHT", table, first, operator, second)


def inner_join(table: str, first: str, operator: str, second: str) -> Join:
    return _join("INNER", table, first, operator, second)


def perd(*conditions: ConditionPrepare) -> str:
    """Render conditions joined with AND, without surrounding parentheses."""
    if not conditions:
        raise ValueError("Raw Condition Can Not Be Empty")
    return " AND ".join(cond() for cond in conditions)


def _group(keyword: str, conditions: tuple[ConditionPrepare, ...]) -> ConditionPrepare:
    def render() -> str:
        if not conditions:
            raise ValueError(f"{keyword} Condition Can Not Be Empty")
        return "(" + f" {keyword} ".join(cond() for cond in conditions) + ")"

    return render


def and_(*conditions: ConditionPrepare) -> ConditionPrepare:
    """Group conditions with AND; an empty group fails when rendered."""
    return _group("AND", conditions)


def or_(*conditions: ConditionPrepare) -> ConditionPrepare:
    """Group conditions with OR; an empty group fails when rendered."""
    return _group("OR", conditions)


def condition(column: str, operator: str, value: object) -> ConditionPrepare:
    """A ``column operator 'value'`` comparison."""
    return lambda: f"({_quote_column(column)} {operator} '{_convert_string(value)}')"


def raw(query: str) -> ConditionPrepare:
    return lambda: query


def between(column: str, value1: object, value2: object) -> ConditionPrepare:
    return lambda: (
        f"{column} BETWEEN {_convert_string(value1)} AND {_convert_string(value2)}"
    )


def in_(column: str, values: object) -> ConditionPrepare:
    return lambda: f"{column} IN(" + ",".join(_convert_slice_string(values)) + ")"


def not_in(column: str, values: object) -> ConditionPrepare:
    return lambda: f"{column} NOT IN(" + ",".join(_convert_slice_string(values)) + ")"


def is_null_condition(column: str) -> ConditionPrepare:
    return lambda: f"({_quote_column(column)} IS NULL)"


def like(column: str, value: object) -> ConditionPrepare:
    """A LIKE condition matching the value anywhere in the column."""
    return condition(column, "LIKE", "%" + _convert_string(value) + "%")