"""
Pytest fixtures for BarberDesk backend tests.

Provides test database setup, two tenants with staff, and the test client.
Every test starts from empty tables (db_session).
"""

from datetime import datetime, timedelta

import pytest
from barberdesk import create_app
from barberdesk.extensions import db
from barberdesk.models import Organization, Profile, Client, Service, Appointment
from barberdesk.permissions import ROLE_ADMIN, ROLE_BARBER
from barberdesk.services.auth_service import create_user
from barberdesk.services.permission_service import assign_role
from barberdesk.services import products_service


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'DEFAULT_TIMEZONE': 'UTC',
        'WEBHOOK_DELIVERY_ENABLED': True,
        'ENFORCE_STATUS_TRANSITIONS': False,
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
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_org(db_session, name: str, slug: str) -> Organization:
    org = Organization(name=name, slug=slug, timezone="UTC", is_active=True)
    db_session.add(org)
    db_session.commit()
    return org


def make_member(db_session, org, email: str, full_name: str, role: str, commission_rate=0) -> Profile:
    """User + profile + role inside org."""
    user = create_user(email, PASSWORD, full_name)
    profile = Profile(
        org_id=org.id,
        user_id=user.id,
        full_name=full_name,
        is_active=True,
        commission_rate=commission_rate,
    )
    db_session.add(profile)
    assign_role(user.id, org.id, role)
    db_session.commit()
    return profile


def make_appointment(db_session, *, client, service, barber, start: datetime, status: str = "scheduled", price_cents=None) -> Appointment:
    appointment = Appointment(
        org_id=client.org_id,
        client_id=client.id,
        service_id=service.id,
        barber_id=barber.id,
        start_time=start,
        end_time=start + timedelta(minutes=service.duration_minutes),
        price_cents=service.price_cents if price_cents is None else price_cents,
        status=status,
    )
    db_session.add(appointment)
    db_session.commit()
    return appointment


@pytest.fixture(scope='function')
def org_a(db_session):
    """Organization A (first tenant)."""
    return make_org(db_session, "Barbearia Alfa", "barbearia-alfa")


@pytest.fixture(scope='function')
def org_b(db_session):
    """Organization B (second tenant)."""
    return make_org(db_session, "Barbearia Beta", "barbearia-beta")


@pytest.fixture(scope='function')
def admin_a(db_session, org_a):
    return make_member(db_session, org_a, "owner@alfa.com", "Ana Owner", ROLE_ADMIN)


@pytest.fixture(scope='function')
def barber_a(db_session, org_a):
    return make_member(db_session, org_a, "bruno@alfa.com", "Bruno Barber", ROLE_BARBER, commission_rate=40)


@pytest.fixture(scope='function')
def barber_a2(db_session, org_a):
    return make_member(db_session, org_a, "carlos@alfa.com", "Carlos Barber", ROLE_BARBER, commission_rate=50)


@pytest.fixture(scope='function')
def admin_b(db_session, org_b):
    return make_member(db_session, org_b, "owner@beta.com", "Beatriz Owner", ROLE_ADMIN)


@pytest.fixture(scope='function')
def client_a(db_session, org_a):
    row = Client(org_id=org_a.id, name="Joao Silva", phone="11999990000")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def client_b(db_session, org_b):
    row = Client(org_id=org_b.id, name="Maria Souza")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def service_a(db_session, org_a):
    row = Service(org_id=org_a.id, name="Corte", price_cents=5000, duration_minutes=45, category="hair")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def service_b(db_session, org_b):
    row = Service(org_id=org_b.id, name="Barba", price_cents=3000, duration_minutes=30, category="beard")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def product_a(db_session, org_a):
    """Product with an opening stock of 10 recorded in the ledger."""
    return products_service.create_product(
        org_a.id,
        {"name": "Pomada", "sale_price_cents": 4500, "stock_quantity": 10, "min_stock_alert": 3},
    )


@pytest.fixture(scope='function')
def product_b(db_session, org_b):
    return products_service.create_product(org_b.id, {"name": "Shampoo", "sale_price_cents": 3500, "stock_quantity": 4})


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_a):
    return auth_headers(get_auth_token(client, "owner@alfa.com"))


@pytest.fixture(scope='function')
def barber_headers(client, barber_a):
    return auth_headers(get_auth_token(client, "bruno@alfa.com"))


@pytest.fixture(scope='function')
def admin_b_headers(client, admin_b):
    return auth_headers(get_auth_token(client, "owner@beta.com"))
