from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

import spelling_session.app as app_module
from helpers import FakeBackend, ManualScheduler
from spelling_session.host import PracticeHost
from spelling_session.runtime.kv import MemoryKeyValueStore


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def storage():
    return MemoryKeyValueStore()


@pytest.fixture()
def host(scheduler, backend, storage):
    practice = PracticeHost.create(storage=storage, backend=backend, scheduler=scheduler, clock=scheduler.clock)
    yield practice
    practice.close()


@pytest.fixture()
def client(host, monkeypatch):
    monkeypatch.setattr(app_module, "host", host)
    with TestClient(app_module.app) as c:
        yield c
