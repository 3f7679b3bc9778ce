"""
Shared pytest fixtures for the PartnerIQ test suite.

Provides:
    - app: Flask application on an in-memory SQLite database (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context and table recreate (autouse)
    - client: Flask test client
    - ops: PartnerOperations wired to the database storage
    - narrator: the FakeNarrator the app was built with, reset per test
    - memory_ops: PartnerOperations over a fresh MemoryStorage
"""

import pytest

from partneriq import create_app
from partneriq.database import db as _db
from partneriq.exceptions import AIGenerationError
from partneriq.narrative import UntrustedAssessment
from partneriq.operations import PartnerOperations
from partneriq.storage import MemoryStorage


class FakeNarrator:
    """Stands in for NarrativeGenerator; records calls and can be told to fail."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.analysis = "**Current Technology Stack**: Azure IoT\n\n**Key Competitors**: HPE"
        self.strategy = "**Current Digital Twin Initiatives**: Pilot lines"
        self.raw_score = 87
        self.notes = "**Opportunity Assessment**: Strong fit for edge infrastructure"
        self.error = None
        self.calls = []

    def _call(self, operation, *args):
        self.calls.append((operation, args))
        if self.error is not None:
            raise AIGenerationError(operation, self.error)

    def generate_competitive_analysis(self, company_name, industry, digital_twin_status):
        self._call('competitive analysis', company_name, industry, digital_twin_status)
        return self.analysis

    def generate_opportunity_assessment(self, company_name, industry, revenue, digital_twin_maturity):
        self._call('opportunity assessment', company_name, industry, revenue, digital_twin_maturity)
        return UntrustedAssessment(raw_score=self.raw_score, notes=self.notes)

    def generate_digital_twin_strategy(self, company_name, industry, business_areas):
        self._call('digital twin strategy', company_name, industry, business_areas)
        return self.strategy


_NARRATOR = FakeNarrator()


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app(
        test_config={
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
            'STORAGE_BACKEND': 'database',
            'SEED_DEMO_DATA': False,
        },
        narrator=_NARRATOR,
    )


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        _NARRATOR.reset()
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def ops(app):
    return app.extensions['partneriq']


@pytest.fixture()
def narrator():
    return _NARRATOR


@pytest.fixture()
def memory_ops():
    return PartnerOperations(MemoryStorage(), FakeNarrator())


# ── Helpers ──────────────────────────────────────────────────────────────


@pytest.fixture()
def make_company(ops):
    """Create a company through the service workflow with sensible defaults."""
    def _make(**kw):
        payload = {"name": "Acme", "industry": "Manufacturing", "country": "USA"}
        payload.update(kw)
        return ops.create_company(payload)
    return _make
