"""Pytest configuration and fixtures for the user audit service.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. API tests swap the composition-root dependencies
for in-memory fakes via app.dependency_overrides.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    get_audit_query_service,
    get_bulk_operations_service,
    get_db,
    get_db_transactional,
    get_soft_delete_service,
)
from app.application.services.audit_query_service import AuditQueryService
from app.application.services.audit_recorder import AuditRecorder
from app.application.use_cases.users import UserBulkOperationsService, UserSoftDeleteService
from app.infrastructure.persistence import database
from app.main import app
from app.shared.context import clear_current_actor
from tests.fakes import FIXED_NOW, InMemoryStore


@pytest.fixture(autouse=True)
def _reset_actor_context():
    """Each test starts with no actor or request id in context."""
    clear_current_actor()
    yield
    clear_current_actor()


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory audit/profile store."""
    return InMemoryStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def recorder(store: InMemoryStore) -> AuditRecorder:
    """Recorder whose repository writes into the fake session it is given."""
    return AuditRecorder(store.audit_repository)


@pytest.fixture
def bulk_service(store: InMemoryStore, recorder: AuditRecorder) -> UserBulkOperationsService:
    return UserBulkOperationsService(store.session, store.profile_repository, recorder)


@pytest.fixture
def soft_delete_service(store: InMemoryStore, recorder: AuditRecorder) -> UserSoftDeleteService:
    return UserSoftDeleteService(store.profile_repository, recorder)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def fake_app_services(
    store: InMemoryStore,
    bulk_service: UserBulkOperationsService,
    soft_delete_service: UserSoftDeleteService,
):
    """Route audit queries, user operations and sessions to the in-memory store."""

    async def fake_db():
        async with store.session() as session:
            yield session

    async def fake_db_transactional():
        async with store.session() as session, session.begin():
            yield session

    app.dependency_overrides[get_audit_query_service] = lambda: AuditQueryService(
        store.audit_repository()
    )
    app.dependency_overrides[get_bulk_operations_service] = lambda: bulk_service
    app.dependency_overrides[get_soft_delete_service] = lambda: soft_delete_service
    app.dependency_overrides[get_db] = fake_db
    app.dependency_overrides[get_db_transactional] = fake_db_transactional
    yield store
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated PostgreSQL database. Skips
    (pytest.skip) when it is not configured. Use @pytest.mark.requires_db to
    mark tests that need this fixture; run without DB via:
    pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
    # Engine pools are bound to the running loop; each test gets a fresh one.
    await database.dispose_engine()
