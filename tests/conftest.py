# Rev 0.2.0

"""Pytest fixtures for ganttboard (Rev 0.2.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from ganttboard.repositories.db import LocalDatabase
from ganttboard.repositories.local_store import LocalRepository, LocalStore
from ganttboard.services.connection import ConnectionContext

from fakes import FakeSupabase


@pytest.fixture()
def db(tmp_path: Path):
    database = LocalDatabase(path=tmp_path / "board.db")
    try:
        yield database
    finally:
        database.close()


@pytest.fixture()
def store(db) -> LocalStore:
    return LocalStore(db)


@pytest.fixture()
def local_repo(store) -> LocalRepository:
    return LocalRepository(store)


@pytest.fixture()
def fake_client() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def client_factory(fake_client):
    """Async factory handing out the same fake client; records (url, key) calls."""
    calls = []

    async def factory(url: str, key: str):
        calls.append((url, key))
        return fake_client

    factory.calls = calls
    return factory


@pytest.fixture()
def connection(db, client_factory) -> ConnectionContext:
    return ConnectionContext(db, client_factory=client_factory)


@pytest.fixture(scope="session")
def qt_core():
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
