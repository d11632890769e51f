"""In-memory stand-in for the Supabase query builder used by db.py."""
from types import SimpleNamespace

import pytest


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table_name = table
        self.filters = []
        self.order_by = None
        self.start = None
        self.end = None
        self.limit_n = None
        self.count_mode = None
        self.rows_to_insert = None

    def select(self, *columns, count=None):
        self.count_mode = count
        return self

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def range(self, start, end):
        self.start, self.end = start, end
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def insert(self, rows):
        self.rows_to_insert = rows if isinstance(rows, list) else [rows]
        return self

    def execute(self):
        self.client.calls.append(self)
        rows = self.client.tables.setdefault(self.table_name, [])
        if self.rows_to_insert is not None:
            if self.client.fail_inserts or len(self.client.inserts(self.table_name)) == self.client.fail_on_insert:
                raise RuntimeError("row violates check constraint")
            for row in self.rows_to_insert:
                rows.append({"id": len(rows) + 1, **row})
            return SimpleNamespace(data=self.rows_to_insert, count=None)

        matched = [r for r in rows if all(f(r) for f in self.filters)]
        if self.order_by:
            column, desc = self.order_by
            matched.sort(key=lambda r: r.get(column), reverse=desc)
        total = len(matched)
        if self.start is not None:
            matched = matched[self.start : self.end + 1]
        if self.limit_n is not None:
            matched = matched[: self.limit_n]
        return SimpleNamespace(data=matched, count=total if self.count_mode == "exact" else None)


class FakeClient:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []
        self.fail_inserts = False
        # 1-based insert call (per table) that raises, rejecting that whole insert
        self.fail_on_insert = None

    def table(self, name):
        return FakeQuery(self, name)

    def inserts(self, table):
        return [c for c in self.calls if c.table_name == table and c.rows_to_insert is not None]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def mmi_client():
    rows = [{"id": i, "question": f"Question {i}", "answer": f"Answer {i}"} for i in range(1, 11)]
    return FakeClient({"MMI": rows})
