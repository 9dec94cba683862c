"""
Pytest fixtures for Andiamo backend tests.

Provides an in-memory app, per-test table wipe, factory fixtures for the
catalogue, ambassadors and orders, and a logged-in admin client.
"""

from decimal import Decimal

import bcrypt
import pytest

from andiamo import create_app
from andiamo.extensions import db
from andiamo.models import Admin, Ambassador, Event, EventPass, Order, OrderPass, PaymentOption
from andiamo.services.auth_service import hash_password
from andiamo.services.order_statuses import OrderStatus, PaymentMethod, OrderSource


ADMIN_EMAIL = "admin@andiamo.tn"
ADMIN_PASSWORD = "Password123!"
AMBASSADOR_PASSWORD = "secret123"

# Low cost factor keeps fixture setup fast; verification works at any cost
_AMBASSADOR_HASH = bcrypt.hashpw(AMBASSADOR_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-jwt-secret-with-enough-length-123',
        'WINSMS_API_KEY': None,
        'CRON_SECRET': None,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def payment_options(db_session):
    """All three options enabled."""
    rows = [
        PaymentOption(option_type=PaymentMethod.ONLINE.value, enabled=True),
        PaymentOption(option_type=PaymentMethod.EXTERNAL_APP.value, enabled=True,
                      app_name="AndiamoPay", external_link="https://pay.example.com"),
        PaymentOption(option_type=PaymentMethod.AMBASSADOR_CASH.value, enabled=True),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture(scope='function')
def event(db_session):
    ev = Event(name="Summer Opening", venue="Sahloul Arena", city="Sousse")
    db_session.add(ev)
    db_session.commit()
    return ev


@pytest.fixture(scope='function')
def make_pass(db_session, event):
    def _make(name="VIP", price="50.00", max_quantity=None, sold_quantity=0, is_active=True, event_id=None):
        p = EventPass(
            event_id=event_id or event.id,
            name=name,
            price=Decimal(price),
            max_quantity=max_quantity,
            sold_quantity=sold_quantity,
            is_active=is_active,
        )
        db_session.add(p)
        db_session.commit()
        return p
    return _make


@pytest.fixture(scope='function')
def make_ambassador(db_session):
    counter = {"n": 0}

    def _make(full_name=None, city="Sousse", ville="Sahloul", status="approved", phone=None):
        counter["n"] += 1
        amb = Ambassador(
            full_name=full_name or f"Ambassador {counter['n']}",
            phone=phone or f"2{counter['n']:07d}",
            city=city,
            ville=ville,
            status=status,
            password=_AMBASSADOR_HASH,
        )
        db_session.add(amb)
        db_session.commit()
        return amb
    return _make


@pytest.fixture(scope='function')
def ambassador(make_ambassador):
    return make_ambassador(full_name="Sami Ben Ali", phone="20123456")


@pytest.fixture(scope='function')
def make_order(db_session):
    """Insert an order directly in a given status (bypasses checkout rules)."""
    def _make(status=OrderStatus.PENDING_CASH, ambassador=None, payment_method=PaymentMethod.AMBASSADOR_CASH,
              quantity=2, price="50.00", created_at=None, pass_id=None):
        order = Order(
            source=(OrderSource.AMBASSADOR_MANUAL if payment_method == PaymentMethod.AMBASSADOR_CASH
                    else OrderSource.PLATFORM_ONLINE).value,
            user_name="Client Test",
            user_phone="98765432",
            city="Sousse",
            ville="Sahloul",
            ambassador_id=ambassador.id if ambassador else None,
            pass_type="VIP",
            quantity=quantity,
            total_price=Decimal(price) * quantity,
            payment_method=payment_method.value,
            status=status.value,
        )
        if created_at is not None:
            order.created_at = created_at
        db_session.add(order)
        db_session.flush()
        db_session.add(OrderPass(order_id=order.id, pass_id=pass_id, pass_type="VIP",
                                 quantity=quantity, price=Decimal(price)))
        db_session.commit()
        return order
    return _make


@pytest.fixture(scope='function')
def admin(db_session):
    a = Admin(email=ADMIN_EMAIL, name="Admin", password=hash_password(ADMIN_PASSWORD), role="admin")
    db_session.add(a)
    db_session.commit()
    return a


@pytest.fixture(scope='function')
def admin_client(client, admin):
    """Test client carrying a valid adminToken cookie."""
    resp = client.post('/api/admin-login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client
