"""Units of work over the Flask-scoped SQLAlchemy session.

``SQLAlchemyUnitOfWork`` is the read-write boundary: a clean exit commits,
any exception rolls everything back, so a donation's status change and its
donor's counters are persisted together or not at all.

``SQLAlchemyReadOnlyUnitOfWork`` guards reads: any ORM flush attempted inside
it raises, and ``commit()`` is refused.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, scoped_session

from donor_api.core.extensions import db
from donor_api.repositories import BloodCenterRepository, DonationRepository, UserRepository
from donor_api.uow.base import UnitOfWork


class _SessionBound(UnitOfWork):
    def __init__(self) -> None:
        self.session = db.session
        self.users = UserRepository(session=self.session)
        self.blood_centers = BloodCenterRepository(session=self.session)
        self.donations = DonationRepository(session=self.session)

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyUnitOfWork(_SessionBound):
    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()


class SQLAlchemyReadOnlyUnitOfWork(_SessionBound):
    def __init__(self) -> None:
        super().__init__()
        self._guarded: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # The listener goes on the concrete Session; on a scoped_session it
        # would apply to every session the registry ever creates.
        target = self.session() if isinstance(self.session, scoped_session) else self.session
        event.listen(target, "before_flush", _refuse_flush)
        self._guarded = target
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._guarded is not None and event.contains(self._guarded, "before_flush", _refuse_flush):
            event.remove(self._guarded, "before_flush", _refuse_flush)
        self._guarded = None

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")


def _refuse_flush(session: Session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )
