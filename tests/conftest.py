import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool
from datetime import datetime, timedelta, timezone

from app.main import app
from app.database.engine import enable_sqlite_savepoints, get_db
from app.core.auth import create_access_token
from app.models.sales import Customer
from app.services.sync import (
    BatchSyncProcessor,
    ChangePuller,
    ConflictResolver,
    RegistryFieldTranslator,
    SyncDiagnostics,
    build_default_registry,
)

CLIENT_ID = "client-a"
BRANCH_ID = "branch-1"
DEVICE_ID = "till-01"

# Test database setup
@pytest.fixture(name="engine")
def engine_fixture():
    engine = enable_sqlite_savepoints(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    ))
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_db] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(name="registry")
def registry_fixture():
    return build_default_registry()

@pytest.fixture(name="translator")
def translator_fixture(registry):
    return RegistryFieldTranslator(registry)

@pytest.fixture(name="processor")
def processor_fixture(registry, translator):
    return BatchSyncProcessor(registry, translator)

@pytest.fixture(name="puller")
def puller_fixture(registry):
    return ChangePuller(registry)

@pytest.fixture(name="resolver")
def resolver_fixture(registry, translator):
    return ConflictResolver(registry, translator)

@pytest.fixture(name="diagnostics")
def diagnostics_fixture(registry):
    return SyncDiagnostics(registry)

@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    token = create_access_token({
        "sub": "user-1",
        "client_id": CLIENT_ID,
        "branch_id": BRANCH_ID,
        "device_id": DEVICE_ID
    })
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture(name="stored_customer")
def stored_customer_fixture(session: Session):
    """A customer already on the server, last changed an hour ago."""
    customer = Customer(
        id="cust-1",
        client_id=CLIENT_ID,
        branch_id=BRANCH_ID,
        name="Mona Adel",
        phone="+201001234567",
        server_updated_at=datetime.utcnow() - timedelta(hours=1),
        sync_version=1
    )
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer

