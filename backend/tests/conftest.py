"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Application code
commits its units of work into that SAVEPOINT; the outer transaction is
rolled back when the test ends.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from donor_api.core.config import TestingConfig
from donor_api.core.extensions import db as _db
from donor_api.factory import create_app
from donor_api.services._shared.ports.token_provider import TokenKind


class _TestScopedSession(scoped_session):
    """Scoped session that survives Flask-SQLAlchemy's per-request ``remove()``.

    Objects a test arranged stay attached and are only expired, so they
    reload after a request even when its unit of work rolled back.
    :meth:`dispose` is the real teardown.
    """

    def remove(self) -> None:
        if not self.registry.has():
            return
        current = self.registry()
        if not current.is_active:
            current.rollback()
        current.expire_all()

    def dispose(self) -> None:
        super().remove()


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - ``isolation_level=None`` hands transaction control to SQLAlchemy so
      SAVEPOINTs behave (see the ``begin`` listener in :func:`db`).
    - No Redis: the in-memory denylist is used.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"isolation_level": None}}
    REDIS_URL = None
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        engine = _db.engine

    # pysqlite never emits BEGIN on its own once autocommit is handed over
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    event.listen(engine, "begin", _begin)
    yield _db
    event.remove(engine, "begin", _begin)

    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    """Keep a dedicated connection open for the whole session."""
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a scoped session joined to a per-test outer transaction.

    ``join_transaction_mode="create_savepoint"`` turns every ``commit()`` or
    ``rollback()`` issued by application code into a SAVEPOINT release or
    rollback, so units of work behave normally while nothing reaches the
    database for good. ``db.session`` is swapped for the duration of the test.
    """
    outer = connection.begin()
    factory = sessionmaker(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = _TestScopedSession(factory)

    original_session = db.session
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.dispose()
        db.session = original_session
        outer.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client; commit factory data with ``session.commit()`` first."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Factory Boy writes through the swapped db.session -----------------------
@pytest.fixture(autouse=True)
def _transactional(session):
    """Run every test inside the transactional session."""
    return session


# -- Identities -----------------------------------------------------------------
@pytest.fixture()
def token_provider(app):
    return app.extensions["token_provider"]


@pytest.fixture()
def auth_headers(token_provider):
    """Return a builder of ``Authorization`` headers for a user."""

    def _build(user) -> dict[str, str]:
        token = token_provider.issue(user.id, TokenKind.ACCESS)
        return {"Authorization": f"Bearer {token}"}

    return _build


@pytest.fixture()
def user(session):
    from tests.factories.user import UserFactory

    u = UserFactory()
    session.commit()
    return u


@pytest.fixture()
def admin(session):
    from tests.factories.user import UserFactory

    u = UserFactory(admin=True)
    session.commit()
    return u


@pytest.fixture()
def center(session):
    from tests.factories.blood_center import BloodCenterFactory

    c = BloodCenterFactory()
    session.commit()
    return c
