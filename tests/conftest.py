from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import lotstock.persistence.pg as pg
from lotstock.domain.batches.models import Batch
from lotstock.persistence.batches import add_batches
from lotstock.persistence.models import Base


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_engine(test_db_path: Path):
    engine = create_engine(
        f"sqlite+pysqlite:///{test_db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    pg.engine = engine
    pg.SessionLocal = TestSessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def clean_db(configure_test_engine):
    with pg.session_scope() as s:
        for table in reversed(Base.metadata.sorted_tables):
            s.execute(table.delete())
    yield


@pytest.fixture()
def seed(clean_db):
    def _seed(pharmacy_id: str, batches: list[Batch]) -> None:
        with pg.session_scope() as s:
            add_batches(s, pharmacy_id, batches)

    return _seed


@pytest.fixture()
def client(clean_db):
    from lotstock.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_batch():
    counter = {"n": 0}

    def _make(name: str, stock: int, expiry: date, **extra) -> Batch:
        counter["n"] += 1
        fields = {
            "id": extra.pop("id", f"b{counter['n']}"),
            "name": name,
            "category": "Tablet",
            "current_stock": stock,
            "reorder_level": 5,
            "expiry_date": expiry,
            "unit_price": Decimal("2.50"),
        }
        fields.update(extra)
        return Batch(**fields)

    return _make


@pytest.fixture()
def amoxicillin(make_batch) -> list[Batch]:
    return [
        make_batch("Amoxicillin", 10, date(2025, 7, 1), id="A"),
        make_batch("Amoxicillin", 5, date(2025, 8, 1), id="B"),
    ]

