"""Base model class for SQLAlchemy models."""

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models"""

    pass


class SchemaVersion(Base):
    """Track database schema version."""

    __tablename__ = "schema_version"

    # Only one row will exist
    version: Mapped[int] = mapped_column(Integer, primary_key=True)

    def __repr__(self) -> str:
        return f"SchemaVersion(version={self.version})"
