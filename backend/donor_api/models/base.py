"""Columns and behaviour shared by every persisted entity."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from .types import UTCDateTime


class Entity:
    """
    Integer ``id`` plus database-maintained audit timestamps.

    ``created_at`` is set by the database on insert and ``updated_at`` on
    every UPDATE, including the conditional bulk updates issued by
    repositories. Both load back as aware UTC datetimes.

    ``__repr_attr__`` names one extra attribute shown by ``repr``.
    """

    __repr_attr__ = None

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        label = ""
        if self.__repr_attr__:
            label = f" {self.__repr_attr__}={getattr(self, self.__repr_attr__, None)!r}"
        return f"<{type(self).__name__} id={self.id}{label}>"
