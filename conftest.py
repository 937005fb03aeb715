"""
In-memory stand-in for the supabase client used by the tests.

Only the builder calls the app makes are mirrored: table() with
select/insert/update/delete, eq/is_/not_/or_ filters, order, limit and
maybe_single, plus rpc(), functions.invoke() and auth.admin.delete_user().
"""

from __future__ import annotations

import copy
import json
import sys
from pathlib import Path
from typing import Any

import pytest

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class FakeResponse:
    def __init__(self, data: Any) -> None:
        self.data = data


def _matches_or(row: dict, expr: str) -> bool:
    for clause in expr.split(","):
        col, op, value = clause.split(".", 2)
        if op == "is" and value == "null" and row.get(col) is None:
            return True
        if op == "eq":
            cell = row.get(col)
            if str(cell).lower() == value.lower():
                return True
    return False


class FakeQuery:
    def __init__(self, client: "FakeClient", table: str) -> None:
        self.client = client
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.filters: list = []
        self.ordering: list[tuple[str, bool]] = []
        self.row_limit: int | None = None
        self.single_row = False
        self._negate = False

    # builder
    def select(self, columns: str = "*") -> "FakeQuery":
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.action, self.payload = "update", payload
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate = True
        return self

    def _add(self, check) -> "FakeQuery":
        negate, self._negate = self._negate, False
        self.filters.append((lambda row: not check(row)) if negate else check)
        return self

    def eq(self, col: str, value: Any) -> "FakeQuery":
        return self._add(lambda row: row.get(col) == value)

    def in_(self, col: str, values: list) -> "FakeQuery":
        return self._add(lambda row: row.get(col) in values)

    def is_(self, col: str, value: str) -> "FakeQuery":
        return self._add(lambda row: row.get(col) is None)

    def or_(self, expr: str) -> "FakeQuery":
        return self._add(lambda row: _matches_or(row, expr))

    def order(self, col: str, desc: bool = False) -> "FakeQuery":
        self.ordering.append((col, desc))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single_row = True
        return self

    # execution
    def _selected(self) -> list[dict]:
        return [row for row in self.client.tables.setdefault(self.table, []) if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResponse | None:
        self.client.calls.append((self.table, self.action, copy.deepcopy(self.payload)))
        if self.table in self.client.failing_tables:
            raise RuntimeError(f"{self.table} is unavailable")
        rows = self.client.tables.setdefault(self.table, [])
        if self.action == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = dict(item)
                row.setdefault("id", f"{self.table}-{len(rows) + 1}")
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)
        if self.action == "update":
            updated = []
            for row in self._selected():
                row.update(self.payload)
                updated.append(dict(row))
            return FakeResponse(updated)
        if self.action == "delete":
            doomed = self._selected()
            self.client.tables[self.table] = [row for row in rows if row not in doomed]
            return FakeResponse(doomed)
        data = [dict(row) for row in self._selected()]
        for col, desc in reversed(self.ordering):
            present = [r for r in data if r.get(col) is not None]
            missing = [r for r in data if r.get(col) is None]
            data = sorted(present, key=lambda r: r[col], reverse=desc) + missing
        if self.row_limit is not None:
            data = data[: self.row_limit]
        if self.single_row:
            # supabase-py returns None when maybe_single() finds nothing.
            return FakeResponse(data[0]) if data else None
        return FakeResponse(data)


class FakeRpc:
    def __init__(self, client: "FakeClient", name: str, params: dict) -> None:
        self.client, self.name, self.params = client, name, params

    def execute(self) -> FakeResponse:
        self.client.rpc_calls.append((self.name, dict(self.params)))
        result = self.client.rpc_results.get(self.name)
        if isinstance(result, Exception):
            raise result
        return FakeResponse(result)


class FakeFunctions:
    def __init__(self, client: "FakeClient") -> None:
        self.client = client

    def invoke(self, name: str, invoke_options: dict | None = None) -> bytes:
        self.client.function_calls.append((name, (invoke_options or {}).get("body")))
        result = self.client.function_results.get(name)
        if isinstance(result, Exception):
            raise result
        return json.dumps(result).encode("utf-8")


class FakeAdmin:
    def __init__(self, client: "FakeClient") -> None:
        self.client = client

    def delete_user(self, user_id: str) -> None:
        self.client.deleted_users.append(user_id)
        if user_id in self.client.failing_users:
            raise RuntimeError("User not found")


class FakeAuth:
    def __init__(self, client: "FakeClient") -> None:
        self.admin = FakeAdmin(client)


class FakeClient:
    def __init__(self, tables: dict[str, list[dict]] | None = None) -> None:
        self.tables: dict[str, list[dict]] = copy.deepcopy(tables or {})
        self.failing_tables: set[str] = set()
        self.failing_users: set[str] = set()
        self.rpc_results: dict[str, Any] = {}
        self.function_results: dict[str, Any] = {}
        self.calls: list[tuple] = []
        self.rpc_calls: list[tuple] = []
        self.function_calls: list[tuple] = []
        self.deleted_users: list[str] = []
        self.functions = FakeFunctions(self)
        self.auth = FakeAuth(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
