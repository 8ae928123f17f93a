"""Shared pytest configuration and fixtures."""

import json

import httpx
import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: tests that wait on real time or the network")


class FakeAirtable:
    """In-memory stand-in for the Airtable REST API.

    Records are served ``page_size`` at a time with an ``offset`` token.
    """

    def __init__(self, page_size=2):
        self.page_size = page_size
        self.requests = []
        self.bases = [{"id": "app1", "name": "Main"}]
        self.tables = {"app1": [{"id": "tbl1", "name": "Tasks"}]}
        self.records = {
            ("app1", "tbl1"): [
                {"id": f"rec{i}", "fields": {"title": f"task {i}", "done": i % 2 == 0}}
                for i in range(5)
            ],
        }
        self.created = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != "Bearer secret":
            return httpx.Response(401, json={"error": "AUTHENTICATION_REQUIRED"})

        parts = request.url.path.split("/")[2:]
        if parts == ["meta", "bases"]:
            return httpx.Response(200, json={"bases": self.bases})
        if parts[:2] == ["meta", "bases"] and parts[3:] == ["tables"]:
            return httpx.Response(200, json={"tables": self.tables.get(parts[2], [])})
        if len(parts) == 2:
            return self._table(request, tuple(parts))
        if len(parts) == 3:
            return self._record(request, tuple(parts[:2]), parts[2])
        return httpx.Response(404, json={"error": "NOT_FOUND"})

    def _table(self, request, key):
        records = self.records.setdefault(key, [])
        if request.method == "POST":
            batch = json.loads(request.content)["records"]
            created = []
            for record in batch:
                record = {"id": f"new{self.created}", "fields": record["fields"]}
                self.created += 1
                records.append(record)
                created.append(record)
            return httpx.Response(200, json={"records": created})

        formula = request.url.params.get("filterByFormula")
        if formula == "{done}":
            records = [r for r in records if r["fields"].get("done")]
        start = int(request.url.params.get("offset", "0"))
        page = {"records": records[start:start + self.page_size]}
        if start + self.page_size < len(records):
            page["offset"] = str(start + self.page_size)
        return httpx.Response(200, json=page)

    def _record(self, request, key, record_id):
        records = self.records.get(key, [])
        for record in records:
            if record["id"] == record_id:
                break
        else:
            return httpx.Response(404, json={"error": "NOT_FOUND"})

        if request.method == "PATCH":
            record["fields"].update(json.loads(request.content)["fields"])
        elif request.method == "DELETE":
            records.remove(record)
            return httpx.Response(200, json={"id": record_id, "deleted": True})
        return httpx.Response(200, json=record)


@pytest.fixture
def fake_airtable():
    return FakeAirtable()
