"""
Pytest fixtures for salonbook backend tests.

Provides an in-memory database, two tenant accounts (A and B) each with an
owner, a service, a client and a staff member, plus auth-header helpers.
"""

import pytest

from salonbook import create_app
from salonbook.extensions import db
from salonbook.models import Client, Service, Staff, ROLE_ADMIN
from salonbook.services.account_service import create_account_with_owner
from salonbook.services.auth_service import create_user

PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
        'EXPOSE_ERROR_DETAILS': False,
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
def tenant_a(db_session):
    """Account A (first tenant) with its owner user."""
    account, owner = create_account_with_owner(
        business_name="Studio A",
        owner_username="owner_a",
        owner_email="owner_a@studio-a.test",
        owner_password=PASSWORD,
    )
    return account, owner


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Account B (second tenant) with its owner user."""
    account, owner = create_account_with_owner(
        business_name="Clinic B",
        owner_username="owner_b",
        owner_email="owner_b@clinic-b.test",
        owner_password=PASSWORD,
    )
    return account, owner


@pytest.fixture(scope='function')
def account_a(tenant_a):
    return tenant_a[0]


@pytest.fixture(scope='function')
def account_b(tenant_b):
    return tenant_b[0]


@pytest.fixture(scope='function')
def admin_user(db_session):
    return create_user(
        username="platform_admin",
        email="admin@salonbook.test",
        password=PASSWORD,
        role=ROLE_ADMIN,
    )


def _make_service(account, name, price_cents, session_count):
    service = Service(
        account_id=account.id,
        service_name=name,
        price_cents=price_cents,
        session_count=session_count,
    )
    db.session.add(service)
    db.session.commit()
    return service


def _make_client(account, first_name, last_name, email, phone):
    client = Client(
        account_id=account.id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
    )
    db.session.add(client)
    db.session.commit()
    return client


def _make_staff(account, full_name):
    staff = Staff(account_id=account.id, full_name=full_name, role="Therapist")
    db.session.add(staff)
    db.session.commit()
    return staff


@pytest.fixture(scope='function')
def service_a(account_a):
    """Five-session package priced 500.00 in account A."""
    return _make_service(account_a, "Laser Package", 50000, 5)


@pytest.fixture(scope='function')
def service_b(account_b):
    return _make_service(account_b, "Massage Package", 30000, 3)


@pytest.fixture(scope='function')
def client_a(account_a):
    return _make_client(account_a, "Ayşe", "Yılmaz", "ayse@example.test", "+905550000001")


@pytest.fixture(scope='function')
def client_b(account_b):
    return _make_client(account_b, "Mehmet", "Demir", "mehmet@example.test", "+905550000002")


@pytest.fixture(scope='function')
def staff_a(account_a):
    return _make_staff(account_a, "Elif Kaya")


@pytest.fixture(scope='function')
def staff_b(account_b):
    return _make_staff(account_b, "Can Arslan")


@pytest.fixture
def make_service():
    return _make_service


@pytest.fixture
def make_client():
    return _make_client


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def headers_a(client, tenant_a):
    return auth_headers(get_auth_token(client, "owner_a"))


@pytest.fixture(scope='function')
def headers_b(client, tenant_b):
    return auth_headers(get_auth_token(client, "owner_b"))


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, "platform_admin"))


@pytest.fixture(scope='function')
def login(client):
    """Log a user in and return its Authorization headers."""
    def _login(username: str, password: str = PASSWORD) -> dict:
        return auth_headers(get_auth_token(client, username, password))
    return _login
