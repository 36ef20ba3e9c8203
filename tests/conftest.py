"""Pytest fixtures for the order service tests."""

import os
import tempfile
from decimal import Decimal

# konfiguracja przed importem app.* - settings czytaja env przy imporcie
_TMP_DIR = tempfile.mkdtemp(prefix="delivery-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'default.db')}")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import sessionmaker

from app.api import create_app
from app.api.deps import get_notifier, get_redis
from app.data import models  # noqa: F401
from app.data.database import Base, get_db
from app.data.models import ProductModel, PromoCodeModel, RiderModel, UserModel
from app.domain.order_status import Caller, Role
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService
from app.services.order_workflow import OrderWorkflow
from app.services.otp_store import SessionStore


@pytest.fixture
def engine(tmp_path):
    """SQLite w pliku; kazda transakcja to BEGIN IMMEDIATE, wiec zapisy sa serializowane."""
    eng = create_engine(
        f"sqlite:///{tmp_path / 'orders.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(eng, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class RecordingDispatch:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def __call__(self, order_id, user_id, status):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.sent.append((order_id, user_id, status))


@pytest.fixture
def dispatch():
    return RecordingDispatch()


@pytest.fixture
def notifier(dispatch):
    return NotificationService(dispatch=dispatch)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(session_factory, redis_client, notifier):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(redis_client):
    """Zwraca naglowki Authorization dla danego usera."""
    store = SessionStore(redis_client)

    def _login(user: UserModel) -> dict:
        token = store.create(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _login


# =====================================================
# FACTORIES
# =====================================================
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: str = "customer", name: str | None = None) -> UserModel:
        counter["n"] += 1
        user = UserModel(
            full_name=name or f"{role} {counter['n']}",
            phone=f"+4860000{counter['n']:04d}",
            role=role,
        )
        db.add(user)
        db.commit()
        if role == "rider":
            db.add(RiderModel(user_id=user.id, is_available=True))
            db.commit()
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(name: str = "Pizza", price: str = "50.00", stock: int = 10) -> ProductModel:
        product = ProductModel(name=name, price=Decimal(price), stock=stock, is_available=stock > 0)
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_promo(db):
    def _make(code: str = "SAVE10", discount_type: str = "percentage", discount_value: str = "10", **fields) -> PromoCodeModel:
        promo = PromoCodeModel(
            code=code.upper(),
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            min_order_amount=fields.pop("min_order_amount", Decimal("0")),
            used_count=fields.pop("used_count", 0),
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(promo)
        db.commit()
        return promo

    return _make


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def rider(make_user):
    return make_user("rider")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def caller_of():
    def _caller(user: UserModel) -> Caller:
        return Caller(user_id=user.id, role=Role(user.role))

    return _caller


# =====================================================
# SERVICE CALLS - kazde wywolanie w osobnej, zamknietej sesji
# =====================================================
@pytest.fixture
def order_service(session_factory, notifier):
    def _call(method: str, *args, **kwargs):
        with session_factory() as session:
            return getattr(OrderService(session, notifier=notifier), method)(*args, **kwargs)

    return _call


@pytest.fixture
def workflow(session_factory, notifier):
    def _create(caller: Caller, items, delivery_address: str = "Main St 1", **kwargs):
        with session_factory() as session:
            return OrderWorkflow(session, notifier=notifier).create_order(
                caller, items=items, delivery_address=delivery_address, **kwargs
            )

    return _create


@pytest.fixture
def fetch(session_factory):
    """Swiezy odczyt wiersza w osobnej sesji (obiekt odlaczony, kolumny zaladowane)."""

    def _fetch(model, ident):
        with session_factory() as session:
            return session.get(model, ident)

    return _fetch


@pytest.fixture
def fetch_all(session_factory):
    def _fetch_all(model, **filters):
        with session_factory() as session:
            return list(session.execute(select(model).filter_by(**filters).order_by(model.id)).scalars())

    return _fetch_all
