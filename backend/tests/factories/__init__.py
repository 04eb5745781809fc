"""Factory Boy base for the donor models.

Factories write through ``db.session``, which the ``session`` fixture swaps
for its transactional scoped session, so arranged rows land in the same
SAVEPOINT the application code uses.
"""

from __future__ import annotations

import factory

from donor_api.core.extensions import db


def _current_session():
    return db.session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_factory = _current_session
        sqlalchemy_session_persistence = "flush"
