"""Columns and helpers common to users, roles and groups."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column


class IdentityRecord:
    """UUID primary key, audit timestamps and a compact ``repr``.

    ``id`` is generated client-side with :func:`uuid.uuid4` so callers can
    reference a principal before the insert is flushed. Both timestamps are
    filled by the database.

    Subclasses list extra attributes for ``repr`` in ``__repr_attrs__``.
    """

    __repr_attrs__: tuple[str, ...] = ()

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        fields = ("id", *self.__repr_attrs__)
        rendered = " ".join(f"{name}={getattr(self, name, None)!r}" for name in fields)
        return f"<{type(self).__name__} {rendered}>"
