import os
import pytest
from fastapi.testclient import TestClient

# Set test database before any imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from app.main import create_app
from app.config import get_settings
from db.base import Base
from db.session import engine
from wallet.client import WalletGatewayError, WalletRejectedError, WalletResult


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create all tables before tests run, drop after all tests complete."""
    # Import models to ensure they are registered with Base
    from db.models import Order, Quote, Reward, Swap, Transfer, User, Vesting  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """Clean tables between tests to ensure isolation."""
    yield
    from db.session import SessionLocal
    from db.models import Order, Quote, Reward, Swap, Transfer, User, Vesting

    with SessionLocal() as db:
        for model in (Reward, Transfer, Vesting, Swap, Order, Quote, User):
            db.query(model).delete()
        db.commit()


@pytest.fixture(autouse=True)
def _configure_settings(monkeypatch):
    monkeypatch.setenv("SOURCE_TG_ID", "source-tg")
    monkeypatch.setenv("SEGMENT_KEY", "")
    monkeypatch.setenv("VESTING_ADMIN_ADDRESS", "0x95222290DD7278Aa3Ddd389Cc1E1d165CC4BAfe5")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def db():
    from db.session import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app = create_app()
    with TestClient(app) as client:
        yield client


class FakeGateway:
    """
    Scripted wallet gateway. Each queued item is either a WalletResult,
    a dict payload, or an exception instance to raise.
    """

    def __init__(self, submit=None, status=None, addresses=None):
        self.submit_queue = list(submit or [])
        self.status_queue = list(status or [])
        self.addresses = dict(addresses or {})
        self.submissions = []
        self.status_calls = []
        self.resolve_calls = []

    @staticmethod
    def _next(queue):
        item = queue.pop(0) if queue else WalletResult()
        if isinstance(item, Exception):
            raise item
        if isinstance(item, dict):
            return WalletResult.from_payload(item)
        return item

    def submit(self, submission):
        self.submissions.append(submission)
        return self._next(self.submit_queue)

    def tx_status(self, user_op_hash):
        self.status_calls.append(user_op_hash)
        return self._next(self.status_queue)

    def resolve_address(self, tg_id):
        self.resolve_calls.append(tg_id)
        if tg_id not in self.addresses:
            raise WalletGatewayError(f"unknown user {tg_id}")
        return self.addresses[tg_id]


class FakeNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []
        self.identified = []

    def notify(self, notification):
        self.sent.append(notification)
        if self.fail:
            raise RuntimeError("webhook down")

    def identify(self, user_id, traits, timestamp=None):
        self.identified.append((user_id, traits))


@pytest.fixture
def make_gateway():
    return FakeGateway


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def rejected():
    return WalletRejectedError("rejected", status_code=470)


@pytest.fixture
def failing_notifier():
    return FakeNotifier(fail=True)
