"""
In-memory stand-in for the supabase-py client.

Implements the slice of the PostgREST query builder the services use. Rows live
in plain dicts per table. Unique columns declared up front raise APIError 23505
the way Postgres reports them, so the error mapping is exercised end to end.
"""

import copy
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from postgrest.exceptions import APIError


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _like(pattern: str, value: Any, case_insensitive: bool) -> bool:
    if value is None:
        return False
    regex = "^" + ".*".join(re.escape(part) for part in pattern.split("%")) + "$"
    return re.match(regex, str(value), re.IGNORECASE if case_insensitive else 0) is not None


def _compare(value: Any, other: Any) -> Optional[int]:
    if value is None or other is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            other = type(value)(other)
        except (TypeError, ValueError):
            return None
    else:
        value, other = str(value), str(other)
    return (value > other) - (value < other)


def _coerce(raw: str) -> Any:
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == "null":
        return None
    return raw


def _or_condition(expression: str) -> Callable[[Dict[str, Any]], bool]:
    """One "column.operator.value" term of an or_() filter."""
    column, operator, value = expression.split(".", 2)
    if operator == "ilike":
        return lambda row: _like(value, row.get(column), True)
    if operator == "like":
        return lambda row: _like(value, row.get(column), False)
    if operator == "is":
        return lambda row: row.get(column) is _coerce(value)
    if operator == "eq":
        return lambda row: row.get(column) == _coerce(value) or str(row.get(column)) == value
    if operator in ("gt", "gte", "lt", "lte"):
        expected = {"gt": (1,), "gte": (0, 1), "lt": (-1,), "lte": (-1, 0)}[operator]
        return lambda row: _compare(row.get(column), value) in expected
    raise ValueError(f"Unsupported or_ operator: {operator}")


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str, operation: str, payload: Any = None,
                 columns: str = "*", count: Optional[str] = None, on_conflict: Optional[str] = None):
        self.db = db
        self.table_name = table
        self.operation = operation
        self.payload = payload
        self.columns = columns
        self.count_mode = count
        self.on_conflict = on_conflict
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.bounds: Optional[tuple] = None
        self.max_rows: Optional[int] = None
        self.single_mode: Optional[str] = None
        self._negate = False

    # Filters

    def _add(self, check: Callable[[Dict[str, Any]], bool]) -> "FakeQuery":
        if self._negate:
            self._negate = False
            self.filters.append(lambda row: not check(row))
        else:
            self.filters.append(check)
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate = True
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: row.get(column) == value)

    def neq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: row.get(column) != value)

    def gt(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: _compare(row.get(column), value) == 1)

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: _compare(row.get(column), value) in (0, 1))

    def lt(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: _compare(row.get(column), value) == -1)

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: _compare(row.get(column), value) in (-1, 0))

    def in_(self, column: str, values: Iterable[Any]) -> "FakeQuery":
        allowed = list(values)
        return self._add(lambda row: row.get(column) in allowed)

    def is_(self, column: str, value: Any) -> "FakeQuery":
        expected = _coerce(value) if isinstance(value, str) else value
        return self._add(lambda row: row.get(column) is expected)

    def like(self, column: str, pattern: str) -> "FakeQuery":
        return self._add(lambda row: _like(pattern, row.get(column), False))

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        return self._add(lambda row: _like(pattern, row.get(column), True))

    def contains(self, column: str, values: Sequence[Any]) -> "FakeQuery":
        return self._add(lambda row: set(values).issubset(set(row.get(column) or [])))

    def or_(self, filters: str) -> "FakeQuery":
        conditions = [_or_condition(part) for part in filters.split(",") if part]
        return self._add(lambda row: any(condition(row) for condition in conditions))

    # Modifiers

    def order(self, column: str, desc: bool = False, nullsfirst: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.bounds = (start, end)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.max_rows = size
        return self

    def single(self) -> "FakeQuery":
        self.single_mode = "single"
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single_mode = "maybe"
        return self

    # Execution

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",") if name.strip()]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def _select(self) -> FakeResponse:
        rows = [row for row in self.db.rows(self.table_name) if self._matches(row)]
        for column, desc in reversed(self.orders):
            present = [row for row in rows if row.get(column) is not None]
            missing = [row for row in rows if row.get(column) is None]
            present.sort(key=lambda row: row.get(column), reverse=desc)
            rows = present + missing
        total = len(rows)
        if self.bounds is not None:
            rows = rows[self.bounds[0]:self.bounds[1] + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        data = [self._project(row) for row in rows]
        count = total if self.count_mode else None
        if self.single_mode == "single":
            if len(data) != 1:
                raise APIError({"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"})
            return FakeResponse(data[0], count)
        if self.single_mode == "maybe":
            return FakeResponse(data[0] if data else None, count)
        return FakeResponse(data, count)

    def _insert(self, records: List[Dict[str, Any]]) -> FakeResponse:
        created = []
        for record in records:
            row = dict(record)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", _now())
            for name, value in self.db.defaults.get(self.table_name, {}).items():
                row.setdefault(name, copy.deepcopy(value))
            self.db.check_unique(self.table_name, row)
            self.db.rows(self.table_name).append(row)
            created.append(copy.deepcopy(row))
        return FakeResponse(created)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.operation))
        failure = self.db.failures.get(self.table_name)
        if failure is not None:
            raise failure
        if self.operation == "select":
            return self._select()
        if self.operation == "insert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            return self._insert(records)
        if self.operation == "update":
            updated = []
            for row in self.db.rows(self.table_name):
                if self._matches(row):
                    candidate = {**row, **self.payload}
                    self.db.check_unique(self.table_name, candidate, ignore=row)
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)
        if self.operation == "delete":
            table = self.db.rows(self.table_name)
            deleted = [row for row in table if self._matches(row)]
            table[:] = [row for row in table if not self._matches(row)]
            return FakeResponse(deleted)
        if self.operation == "upsert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [key.strip() for key in (self.on_conflict or "id").split(",")]
            result = []
            for record in records:
                existing = next(
                    (row for row in self.db.rows(self.table_name)
                     if all(row.get(key) == record.get(key) for key in keys)),
                    None,
                )
                if existing is None:
                    result.extend(self._insert([record]).data)
                else:
                    existing.update(copy.deepcopy(record))
                    result.append(copy.deepcopy(existing))
            return FakeResponse(result)
        raise ValueError(f"Unsupported operation {self.operation}")


class FakeTable:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def select(self, columns: str = "*", count: Optional[str] = None) -> FakeQuery:
        return FakeQuery(self.db, self.name, "select", columns=columns, count=count)

    def insert(self, payload: Any) -> FakeQuery:
        return FakeQuery(self.db, self.name, "insert", payload=payload)

    def update(self, payload: Dict[str, Any]) -> FakeQuery:
        return FakeQuery(self.db, self.name, "update", payload=payload)

    def delete(self) -> FakeQuery:
        return FakeQuery(self.db, self.name, "delete")

    def upsert(self, payload: Any, on_conflict: str = "id") -> FakeQuery:
        return FakeQuery(self.db, self.name, "upsert", payload=payload, on_conflict=on_conflict)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, content: bytes, file_options: Optional[Dict[str, Any]] = None):
        self.storage.files[(self.name, path)] = content
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"{FakeStorage.BASE_URL}/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths: List[str]):
        for path in paths:
            self.storage.files.pop((self.name, path), None)
        return [{"name": path} for path in paths]


class FakeStorage:
    BASE_URL = "https://project.supabase.co"

    def __init__(self):
        self.files: Dict[tuple, bytes] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self, unique: Optional[Dict[str, List[str]]] = None, defaults: Optional[Dict[str, Dict[str, Any]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        # table -> unique columns; "a,b" declares a composite key
        self.unique = unique or {}
        self.defaults = defaults or {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        seeded = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", _now())
            self.rows(table).append(row)
            seeded.append(row)
        return seeded

    def fail(self, table: str, code: str = "XX000", message: str = "connection reset") -> None:
        self.failures[table] = APIError({"code": code, "message": message, "details": None, "hint": None})

    def check_unique(self, table: str, row: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None) -> None:
        for spec in self.unique.get(table, []):
            columns = [c.strip() for c in spec.split(",")]
            values = tuple(row.get(c) for c in columns)
            if any(v is None for v in values):
                continue
            for other in self.rows(table):
                if other is ignore:
                    continue
                if tuple(other.get(c) for c in columns) == values:
                    raise APIError({
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
                        "details": f"Key ({', '.join(columns)})=({', '.join(str(v) for v in values)}) already exists.",
                        "hint": None,
                    })
