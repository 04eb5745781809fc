"""Generic repository for SQLAlchemy 2.x aggregates.

Repositories are persistence-only: they never commit or roll back (services
own the unit of work) and never decide business rules. Every public key a
caller can sort, filter or update by goes through a per-repository
whitelist, so request input can never name an arbitrary column.

Two write paths exist:

* :meth:`BaseRepository.update` assigns attributes on a loaded instance so
  model ``@validates`` hooks run.
* :meth:`BaseRepository.update_where` issues one conditional ``UPDATE`` and
  returns the row count. It is the compare-and-set primitive behind donation
  transitions and the donor counters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from donor_api.core.extensions import db

E = TypeVar("E")


@dataclass(slots=True)
class Pagination:
    """1-based ``page``, page size ``limit`` and public sort tokens like ``-created_at``."""

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int


class BaseRepository(Generic[E]):
    """Whitelisted CRUD, pagination and conditional updates for one model.

    Subclasses set ``model`` and override the ``_sortable_fields``,
    ``_filterable_fields`` and ``_updatable_fields`` hooks they need. The
    model must expose an ``id`` primary key.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, else the Flask-scoped ``db.session``."""
        return self._session if self._session is not None else cast(Session, db.session)

    @property
    def _pk(self) -> InstrumentedAttribute[Any]:
        return self.model.id  # type: ignore[attr-defined]

    # ----------------------------- Whitelists -------------------------------

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """
        Reject any key outside ``_updatable_fields``.

        :raises ValueError: On unknown keys, or any key when nothing is updatable.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        return dict(fields)

    # -------------------------------- Reads ---------------------------------

    def get(self, entity_id: Any) -> E | None:
        return self.session.get(self.model, entity_id)

    def get_for_update(self, entity_id: Any) -> E | None:
        """Load by PK with ``SELECT ... FOR UPDATE`` where the backend supports it."""
        stmt = select(self.model).where(self._pk == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def paginate(self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None) -> Page[E]:
        """
        One page of rows matching the whitelisted equality ``filters``.

        ``None`` filter values and unknown keys are ignored, as are unknown
        sort tokens. The primary key is the final tiebreaker, in the direction
        of the first sort token, so pages are stable even on equal timestamps.
        """
        stmt: Select[Any] = select(self.model)
        filterable = self._filterable_fields()
        for key, value in (filters or {}).items():
            if value is not None and key in filterable:
                stmt = stmt.where(filterable[key] == value)

        total = int(
            self.session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        )

        sortable = self._sortable_fields()
        tokens = [(t.lstrip("-"), t.startswith("-")) for t in pagination.sort if t.lstrip("-")]
        for name, desc in tokens:
            if name in sortable:
                stmt = stmt.order_by(sortable[name].desc() if desc else sortable[name].asc())
        newest_first = bool(tokens) and tokens[0][1]
        stmt = stmt.order_by(self._pk.desc() if newest_first else self._pk.asc())

        page, limit = max(pagination.page, 1), max(pagination.limit, 1)
        rows = self.session.execute(stmt.limit(limit).offset((page - 1) * limit)).scalars().all()
        return Page(items=list(rows), total=total, page=page, limit=limit)

    # -------------------------------- Writes --------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its PK is assigned."""
        self.session.add(instance)
        self.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted ``fields`` through ``setattr`` and flush.

        :raises ValueError: On keys outside ``_updatable_fields`` or a model
            validator rejecting a value.
        """
        for key, value in self._sanitize_update_fields(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def update_where(
        self, entity_id: Any, values: Mapping[str, Any], *conditions: ColumnElement[bool]
    ) -> int:
        """
        ``UPDATE ... SET values WHERE id = :id AND conditions`` as one statement.

        ``values`` may hold SQL expressions (``count + 1``). The identity map
        is not synchronised; :meth:`refresh` loaded instances afterwards.

        :returns: Rows updated, ``0`` when the row is gone or a condition failed.
        """
        stmt = (
            update(self.model)
            .where(self._pk == entity_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)  # type: ignore[attr-defined]

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, instance: E) -> E:
        self.session.refresh(instance)
        return instance
