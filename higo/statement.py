"""Parameterised SQL statement builders using ``?`` placeholders."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

__all__ = ["SelectBuilder", "Statement", "delete", "insert", "query", "select", "update"]

_Part = tuple[str, tuple[Any, ...]]


def _eq(mapping: Mapping[str, Any]) -> _Part:
    """Render a column/value mapping as equality tests joined with AND."""
    if not mapping:
        return "(1=1)", ()
    exprs: list[str] = []
    args: list[Any] = []
    for key in sorted(mapping):
        value = mapping[key]
        if value is None:
            exprs.append(f"{key} IS NULL")
        elif isinstance(value, (list, tuple)):
            if not value:
                exprs.append("(1=0)")
            else:
                exprs.append(f"{key} IN ({','.join('?' * len(value))})")
                args.extend(value)
        else:
            exprs.append(f"{key} = ?")
            args.append(value)
    return " AND ".join(exprs), tuple(args)


def _predicate(pred: Any, args: tuple[Any, ...]) -> _Part | None:
    if pred is None or pred == "":
        return None
    if isinstance(pred, str):
        return pred, tuple(args)
    if isinstance(pred, Mapping):
        return _eq(pred)
    raise TypeError(f"expected a string or mapping predicate, got {type(pred).__name__}")


def _append(parts: tuple[_Part, ...], sep: str, args: list[Any]) -> str:
    rendered = []
    for sql, part_args in parts:
        if sql:
            rendered.append(sql)
            args.extend(part_args)
    return sep.join(rendered)


@dataclass(frozen=True)
class SelectBuilder:
    """An immutable SELECT builder; every method returns a new builder."""

    _columns: tuple[str, ...] = ()
    _from: str = ""
    _joins: tuple[_Part, ...] = ()
    _wheres: tuple[_Part, ...] = ()
    _group_bys: tuple[str, ...] = ()
    _havings: tuple[_Part, ...] = ()
    _order_bys: tuple[str, ...] = ()
    _limit: int | None = None
    _offset: int | None = None

    def columns(self, *columns: str) -> SelectBuilder:
        return dataclasses.replace(self, _columns=self._columns + columns)

    def from_(self, table: str) -> SelectBuilder:
        return dataclasses.replace(self, _from=table)

    def join(self, clause: str, *args: Any) -> SelectBuilder:
        return dataclasses.replace(self, _joins=self._joins + (("JOIN " + clause, args),))

    def where(self, pred: Any, *args: Any) -> SelectBuilder:
        part = _predicate(pred, args)
        if part is None:
            return self
        return dataclasses.replace(self, _wheres=self._wheres + (part,))

    def group_by(self, *group_bys: str) -> SelectBuilder:
        return dataclasses.replace(self, _group_bys=self._group_bys + group_bys)

    def having(self, pred: Any, *args: Any) -> SelectBuilder:
        part = _predicate(pred, args)
        if part is None:
            return self
        return dataclasses.replace(self, _havings=self._havings + (part,))

    def order_by(self, *order_bys: str) -> SelectBuilder:
        return dataclasses.replace(self, _order_bys=self._order_bys + order_bys)

    def limit(self, count: int) -> SelectBuilder:
        if count < 0:
            raise ValueError("limit must not be negative")
        return dataclasses.replace(self, _limit=count)

    def offset(self, count: int) -> SelectBuilder:
        if count < 0:
            raise ValueError("offset must not be negative")
        return dataclasses.replace(self, _offset=count)

    def to_sql(self) -> tuple[str, list[Any]]:
        """Return the SQL text and its positional arguments."""
        if not self._columns:
            raise ValueError("select statements must have at least one result column")
        args: list[Any] = []
        sql = "SELECT " + ", ".join(self._columns)
        if self._from:
            sql += " FROM " + self._from
        if self._joins:
            sql += " " + _append(self._joins, " ", args)
        if self._wheres:
            sql += " WHERE " + _append(self._wheres, " AND ", args)
        if self._group_bys:
            sql += " GROUP BY " + ", ".join(self._group_bys)
        if self._havings:
            sql += " HAVING " + _append(self._havings, " AND ", args)
        if self._order_bys:
            sql += " ORDER BY " + ", ".join(self._order_bys)
        if self._limit is not None:
            sql += f" LIMIT {self._limit}"
        if self._offset is not None:
            sql += f" OFFSET {self._offset}"
        return sql, args


class _Operation(Enum):
    SELECT = auto()
    INSERT = auto()
    UPDATE = auto()
    DELETE = auto()


@dataclass
class Statement:
    """A statement collecting SET and WHERE pairs before rendering."""

    operation: _Operation
    table: str = ""
    builder: SelectBuilder = field(default_factory=SelectBuilder)
    _sets: list[tuple[str, Any]] = field(default_factory=list)
    _wheres: list[tuple[str, Any]] = field(default_factory=list)

    def set(self, column: str, value: Any) -> Statement:
        self._sets.append((column, value))
        return self

    def where(self, column: str, value: Any) -> Statement:
        self._wheres.append((column, value))
        return self

    def select(self, *columns: str) -> SelectBuilder:
        return SelectBuilder().columns(*columns)

    def to_sql(self) -> tuple[str, list[Any]]:
        """Return the SQL text and its positional arguments."""
        if self.operation is _Operation.SELECT:
            return self.builder.to_sql()
        if self.operation is _Operation.INSERT:
            return self._insert_sql()
        if self.operation is _Operation.UPDATE:
            return self._update_sql()
        return self._delete_sql()

    def _insert_sql(self) -> tuple[str, list[Any]]:
        if not self.table:
            raise ValueError("insert statements must specify a table")
        columns = [column for column, _ in self._sets]
        values = [value for _, value in self._sets]
        sql = f"INSERT INTO {self.table}"
        if columns:
            sql += " (" + ",".join(columns) + ")"
        sql += " VALUES (" + ",".join("?" * len(values)) + ")"
        return sql, values

    def _update_sql(self) -> tuple[str, list[Any]]:
        if not self.table:
            raise ValueError("update statements must specify a table")
        set_map = dict(self._sets)
        if not set_map:
            raise ValueError("update statements must have at least one Set clause")
        keys = sorted(set_map)
        args = [set_map[key] for key in keys]
        where_sql, where_args = _eq(dict(self._wheres))
        sql = (
            f"UPDATE {self.table} SET "
            + ", ".join(f"{key} = ?" for key in keys)
            + " WHERE "
            + where_sql
        )
        return sql, args + list(where_args)

    def _delete_sql(self) -> tuple[str, list[Any]]:
        if not self.table:
            raise ValueError("delete statements must specify a From table")
        where_sql, where_args = _eq(dict(self._wheres))
        return f"DELETE FROM {self.table} WHERE {where_sql}", list(where_args)


def query() -> Statement:
    return Statement(_Operation.SELECT)


def select(*columns: str) -> SelectBuilder:
    return query().select(*columns)


def insert(into: str) -> Statement:
    return Statement(_Operation.INSERT, into)


def update(table: str) -> Statement:
    return Statement(_Operation.UPDATE, table)


def delete(from_: str) -> Statement:
    return Statement(_Operation.DELETE, from_)