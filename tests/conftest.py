"""
Pytest configuration and shared fixtures for pharmastock tests.
"""
import os
import tempfile
from datetime import date

import pytest

from pharmastock import create_app
from pharmastock.extensions import cache, db
from pharmastock.models import DrugLot, Service, User


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    # Create a temporary file to use as the database
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f'sqlite:///{db_path}',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'SECRET_KEY': 'test-secret-key',
        'GOOGLE_AI_API_KEY': None,
        'PHARMACY_TIMEZONE': 'UTC',
        'LOGIN_DISABLED': False,
    })

    with app.app_context():
        db.create_all()
        cache.clear()

    yield app

    # Clean up database
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def app_context(app):
    """Provide an application context for tests that need it."""
    with app.app_context():
        yield


@pytest.fixture
def db_session(app_context):
    """Database session bound to the test app context; rolled back afterwards."""
    yield db.session
    db.session.rollback()


@pytest.fixture
def test_user(app):
    """A persisted, active pharmacist account (detached, attributes loaded)."""
    with app.app_context():
        user = User(username='pharmacist', email='pharmacist@example.com', first_name='Test')
        user.set_password('correct horse')
        db.session.add(user)
        db.session.commit()
        db.session.refresh(user)
        db.session.expunge(user)
        return user


@pytest.fixture
def auth_client(client, test_user):
    """Test client logged in through the Flask-Login session keys."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(test_user.id)
        sess['_fresh'] = True
    return client


def build_lot(**overrides) -> DrugLot:
    """Transient lot for pure-function tests; nothing is persisted."""
    values = {
        'id': 1,
        'barcode': '3400000000001',
        'lot_number': 'L-001',
        'designation': 'Paracetamol 500mg',
        'category': 'Analgesic',
        'initial_stock': 50,
        'current_stock': 50,
        'low_stock_threshold': 10,
        'expiry_date': date(2030, 1, 1),
        'created_at': None,
        'updated_at': None,
    }
    values.update(overrides)
    return DrugLot(**values)


@pytest.fixture
def make_lot():
    return build_lot


@pytest.fixture
def persist_lot(app):
    """Factory persisting a lot and returning its id."""
    def _persist(**overrides):
        values = {
            'barcode': '3400000000001',
            'lot_number': 'L-001',
            'designation': 'Paracetamol 500mg',
            'category': 'Analgesic',
            'initial_stock': 10,
            'current_stock': 10,
            'low_stock_threshold': 5,
            'expiry_date': date(2030, 1, 1),
        }
        values.update(overrides)
        with app.app_context():
            lot = DrugLot(**values)
            db.session.add(lot)
            db.session.commit()
            return lot.id
    return _persist


@pytest.fixture
def persist_service(app):
    """Factory persisting a hospital service and returning its id."""
    def _persist(name='Chirurgie'):
        with app.app_context():
            service = Service(name=name)
            db.session.add(service)
            db.session.commit()
            return service.id
    return _persist
