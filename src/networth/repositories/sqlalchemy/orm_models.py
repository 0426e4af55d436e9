"""SQLAlchemy ORM model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from networth.repositories.sqlalchemy.database import Base


class KeyValueBlobORM(Base):
    """One JSON document per key ("holdings", "snapshots")."""

    __tablename__ = "kv_blobs"

    key = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
