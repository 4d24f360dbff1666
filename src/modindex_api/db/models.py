# SPDX-License-Identifier: MIT
"""SQLAlchemy database models for the mod registry."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ModRecord(Base):
    """A published (id, version) pair.

    Only the numeric triple is stored; pre-release and build metadata are
    dropped on insert.
    """

    __tablename__ = "mods"
    __table_args__ = (UniqueConstraint("id", "major", "minor", "patch", name="uq_mod_version"),)

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(255), index=True)
    major: Mapped[int] = mapped_column(Integer)
    minor: Mapped[int] = mapped_column(Integer)
    patch: Mapped[int] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<ModRecord(id={self.id!r}, version={self.major}.{self.minor}.{self.patch})>"


class PublishKey(Base):
    """A publisher token owned by a user.

    Tokens are stored as SHA-256 digests. A user may own many tokens.
    """

    __tablename__ = "publish_keys"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user: Mapped[str] = mapped_column(String(255), index=True)

    def __repr__(self) -> str:
        return f"<PublishKey(user={self.user!r})>"
