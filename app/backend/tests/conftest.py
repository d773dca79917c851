from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from resplan.core.config import Settings
from resplan.db.base import Base
from resplan.db.session import build_session_factory
from resplan.main import create_app
from resplan.models.entities import ResourceRow
from resplan.services.dashboard_service import DashboardService
from resplan.services.local_cache import LocalSnapshotCache
from resplan.services.persistence_gateway import PersistenceGateway
from resplan.services.record_store import RecordStore
from resplan.services.remote_store import RemoteResourceStore

from factories import BootstrapSpy


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        local_cache_dir=tmp_path / "cache",
        bootstrap_seed=7,
        remote_database_url=None,
        remote_access_key=None,
    )


@pytest.fixture()
def remote_engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=[ResourceRow.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[ResourceRow.__table__])
        engine.dispose()


@pytest.fixture()
def remote_store(remote_engine: Engine) -> RemoteResourceStore:
    return RemoteResourceStore(build_session_factory(remote_engine))


@pytest.fixture()
def cache(tmp_path: Path) -> LocalSnapshotCache:
    return LocalSnapshotCache(tmp_path / "cache" / "dashboard_resources.json")


@pytest.fixture()
def bootstrap() -> BootstrapSpy:
    return BootstrapSpy()


@pytest.fixture()
def gateway_factory(
    cache: LocalSnapshotCache,
    bootstrap: BootstrapSpy,
) -> Generator[Callable[..., PersistenceGateway], None, None]:
    created: list[PersistenceGateway] = []

    def factory(remote: object | None = None) -> PersistenceGateway:
        gateway = PersistenceGateway(cache=cache, bootstrap=bootstrap, remote=remote)
        created.append(gateway)
        return gateway

    yield factory
    for gateway in created:
        gateway.close()


@pytest.fixture()
def dashboard_service(gateway_factory: Callable[..., PersistenceGateway]) -> DashboardService:
    service = DashboardService(store=RecordStore(), gateway=gateway_factory(), visible_month="2025-03")
    service.load()
    return service


@pytest.fixture()
def client(settings: Settings) -> Generator[TestClient, None, None]:
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
