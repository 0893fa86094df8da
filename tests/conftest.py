"""Shared fixtures: schema CSV text, field factories, and a fake backend."""

import asyncio
import json

import pytest

from pdfields.core.errors import BackendError
from pdfields.core.schema import FieldKind, SchemaField

SCHEMA_HEADER = "field_name,description,kind,infer\n"


def _record(name: str, page: int = 1) -> dict:
    return {
        "value": f"value of {name}",
        "match_type": "found",
        "comment": None,
        "page": page,
        "xmin": 0.1,
        "ymin": 0.2,
        "xmax": 0.3,
        "ymax": 0.4,
    }


class FakeBackend:
    """Answers each request with one record per field in the contract.

    ``drop`` names are left out of answers, ``fail_on`` names make the whole
    request raise ``BackendError``, ``raw`` replaces the answer text.
    """

    def __init__(self, drop=(), fail_on=(), raw=None):
        self.drop = set(drop)
        self.fail_on = set(fail_on)
        self.raw = raw
        self.calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def extract(self, document, prompt, contract):
        names = list(contract["required"])
        self.calls.append({"document": document, "prompt": prompt, "names": names})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

        if self.fail_on.intersection(names):
            raise BackendError("connection reset")
        if self.raw is not None:
            return self.raw
        return json.dumps({n: _record(n) for n in names if n not in self.drop})

    async def aclose(self):
        self.closed = True


@pytest.fixture()
def make_fields():
    """Factory: ``make_fields(n)`` gives n valid text fields named f0..f{n-1}."""

    def _make(n: int, infer: bool = False) -> list[SchemaField]:
        return [
            SchemaField(
                field_name=f"f{i}",
                description=f"Description {i}",
                kind=FieldKind.TEXT,
                infer=infer,
            )
            for i in range(n)
        ]

    return _make


@pytest.fixture()
def fake_backend():
    return FakeBackend


@pytest.fixture()
def schema_csv() -> str:
    return (
        SCHEMA_HEADER
        + "title,Paper title,text,false\n"
        + "year,Publication year,number,true\n"
        + "design,Study design,categorical,no\n"
    )
