import fnmatch
import os
import sys

import django
import pytest

# Ensure project root is on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "salesdesk.settings")
django.setup()

from supabase import PostgrestAPIError, StorageException  # noqa: E402

from crm.services import mtd_service, supabase_client  # noqa: E402


def api_error(message="boom", code=None):
    return PostgrestAPIError({"message": message, "code": code})


class DummyResp:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _like(value, pattern, ignore_case):
    value = "" if value is None else str(value)
    pattern = pattern.replace("%", "*")
    if ignore_case:
        value, pattern = value.lower(), pattern.lower()
    return fnmatch.fnmatchcase(value, pattern)


class DummyQuery:
    """Chainable stand-in for a PostgREST table query over in-memory rows."""

    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.operation = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload = None
        self.filters = []
        self.ordering = []
        self.limit_to = None
        self.row_range = None

    # query building
    def select(self, columns="*", count=None):
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, payload):
        self.operation, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.operation, self.payload = "update", payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def _filter(self, op, column, value):
        self.filters.append((op, column, value))
        return self

    def eq(self, column, value):
        return self._filter("eq", column, value)

    def ilike(self, column, pattern):
        return self._filter("ilike", column, pattern)

    def like(self, column, pattern):
        return self._filter("like", column, pattern)

    def in_(self, column, values):
        return self._filter("in", column, list(values))

    def gte(self, column, value):
        return self._filter("gte", column, value)

    def lte(self, column, value):
        return self._filter("lte", column, value)

    def or_(self, expression):
        return self._filter("or", None, expression)

    def order(self, column, desc=False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def range(self, start, end):
        self.row_range = (start, end)
        return self

    # evaluation
    def _matches(self, row, op, column, value):
        current = row.get(column) if column else None
        if op == "eq":
            return current == value
        if op == "ilike":
            return _like(current, value, True)
        if op == "like":
            return _like(current, value, False)
        if op == "in":
            return current in value
        if op == "gte":
            return current is not None and str(current) >= str(value)
        if op == "lte":
            return current is not None and str(current) <= str(value)
        if op == "or":
            for clause in value.split(","):
                col, clause_op, operand = clause.split(".", 2)
                if self._matches(row, clause_op, col, operand):
                    return True
            return False
        raise AssertionError(f"unsupported filter {op}")

    def _selected(self, rows):
        return [r for r in rows if all(self._matches(r, *f) for f in self.filters)]

    def execute(self):
        self.client.queries.append(self)
        failure = self.client.failures.get((self.name, self.operation)) or self.client.failures.get(self.name)
        if failure is not None and not isinstance(failure, BaseException):
            failure = failure(self)
        if failure is not None:
            raise failure
        rows = self.client.tables.setdefault(self.name, [])

        if self.operation == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = []
            for row in new_rows:
                row = dict(row)
                row.setdefault("id", str(len(rows) + 1))
                rows.append(row)
                stored.append(dict(row))
            return DummyResp(stored)

        matched = self._selected(rows)
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return DummyResp([dict(r) for r in matched])
        if self.operation == "delete":
            self.client.tables[self.name] = [r for r in rows if r not in matched]
            return DummyResp([dict(r) for r in matched])

        for column, desc in reversed(self.ordering):
            matched = sorted(matched, key=lambda r: (r.get(column) is None, str(r.get(column))), reverse=desc)
        total = len(matched)
        if self.row_range is not None:
            matched = matched[self.row_range[0] : self.row_range[1] + 1]
        if self.limit_to is not None:
            matched = matched[: self.limit_to]
        return DummyResp([dict(r) for r in matched], count=total if self.count_mode else None)


class DummyRpc:
    def __init__(self, client, name, params):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        self.client.rpc_calls.append((self.name, self.params))
        failure = self.client.failures.get(("rpc", self.name))
        if failure is not None:
            raise failure
        result = self.client.rpc_results.get(self.name)
        if callable(result):
            result = result(self.params)
        return DummyResp(result)


class DummyBucket:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def _check(self):
        failure = self.client.failures.get(("storage", self.name))
        if failure is not None:
            raise failure

    def upload(self, path, content, options=None):
        self._check()
        self.client.objects[path] = content
        return {"path": path}

    def list(self, folder, options=None):
        self._check()
        prefix = folder.rstrip("/") + "/"
        return [{"name": p[len(prefix):]} for p in self.client.objects if p.startswith(prefix)]

    def download(self, path):
        self._check()
        if path not in self.client.objects:
            raise StorageException(f"Object not found: {path}")
        return self.client.objects[path]

    def remove(self, paths):
        self._check()
        for path in paths:
            self.client.objects.pop(path, None)
        return [{"name": p} for p in paths]

    def get_public_url(self, path):
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"


class DummyStorage:
    def __init__(self, client):
        self.client = client

    def from_(self, bucket):
        return DummyBucket(self.client, bucket)


class DummyFunctions:
    def __init__(self, client):
        self.client = client

    def invoke(self, name, invoke_options=None):
        self.client.function_calls.append((name, (invoke_options or {}).get("body")))
        failure = self.client.failures.get(("function", name))
        if failure is not None:
            raise failure
        return b"{}"


class DummyClient:
    """In-memory Supabase client: tables, RPCs, storage and edge functions.

    ``failures`` maps a table name, ``(table, operation)``, ``("rpc", name)``,
    ``("storage", bucket)`` or ``("function", name)`` to the exception raised
    when that call executes. A table failure may also be a callable taking
    the query and returning the exception to raise, or ``None`` to let the
    query run.
    """

    def __init__(self, tables=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.rpc_results = {}
        self.failures = {}
        self.queries = []
        self.rpc_calls = []
        self.function_calls = []
        self.objects = {}
        self.storage = DummyStorage(self)
        self.functions = DummyFunctions(self)

    def table(self, name):
        return DummyQuery(self, name)

    def rpc(self, name, params=None):
        return DummyRpc(self, name, params or {})

    def rows(self, name):
        return self.tables.get(name, [])


@pytest.fixture(autouse=True)
def reset_backend(monkeypatch):
    """Start every test without a cached client or cached holidays."""

    monkeypatch.setattr(supabase_client, "_client", None)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    mtd_service.get_holidays.clear()
    yield
    mtd_service.get_holidays.clear()


@pytest.fixture
def fake_supabase(monkeypatch):
    client = DummyClient()
    monkeypatch.setattr(supabase_client, "_client", client)
    return client


@pytest.fixture
def sales_user(db, django_user_model):
    from crm.models import SalesProfile

    user = django_user_model.objects.create_user(username="sales", password="pw-sales-123")
    SalesProfile.objects.create(user=user, role=SalesProfile.ROLE_USER, spp_code="SPP01", full_name="Sam Sales")
    return user


@pytest.fixture
def admin_user(db, django_user_model):
    from crm.models import SalesProfile

    user = django_user_model.objects.create_user(username="boss", password="pw-boss-123")
    SalesProfile.objects.create(user=user, role=SalesProfile.ROLE_ADMIN, full_name="Ada Admin")
    return user


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def sales_client(api_client, sales_user):
    api_client.force_authenticate(sales_user)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(admin_user)
    return api_client
