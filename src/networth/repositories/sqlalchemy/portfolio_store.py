"""SQLAlchemy implementation of PortfolioStore."""

import json
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from networth.core.exceptions import PersistenceError, ValidationError
from networth.domain.models import Holding, PortfolioSnapshot
from networth.repositories.serialization import (
    holding_from_dict,
    holding_to_dict,
    snapshot_from_dict,
    snapshot_to_dict,
)
from networth.repositories.sqlalchemy.orm_models import KeyValueBlobORM

HOLDINGS_KEY = "holdings"
SNAPSHOTS_KEY = "snapshots"


class SqlAlchemyPortfolioStore:
    """
    Key-value blob store backed by a single SQLite table.

    Each list is stored as one JSON document and written in one commit, so
    readers never see a partially written list.
    """

    def __init__(self, db: Session):
        self._db = db

    def load_holdings(self) -> list[Holding]:
        documents = self._read(HOLDINGS_KEY) or []
        try:
            return [holding_from_dict(d) for d in documents]
        except (KeyError, TypeError, ValueError, ArithmeticError, ValidationError) as e:
            raise PersistenceError(f"Stored holdings are corrupt: {e}") from e

    def save_holdings(self, holdings: list[Holding]) -> None:
        self._write(HOLDINGS_KEY, [holding_to_dict(h) for h in holdings])

    def load_snapshots(self) -> list[PortfolioSnapshot]:
        documents = self._read(SNAPSHOTS_KEY) or []
        try:
            return [snapshot_from_dict(d) for d in documents]
        except (KeyError, TypeError, ValueError, ArithmeticError, ValidationError) as e:
            raise PersistenceError(f"Stored snapshots are corrupt: {e}") from e

    def save_snapshots(self, snapshots: list[PortfolioSnapshot]) -> None:
        self._write(SNAPSHOTS_KEY, [snapshot_to_dict(s) for s in snapshots])

    def clear_all(self) -> None:
        try:
            self._db.query(KeyValueBlobORM).filter(
                KeyValueBlobORM.key.in_([HOLDINGS_KEY, SNAPSHOTS_KEY])
            ).delete()
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Failed to clear data: {e}") from e

    def _read(self, key: str) -> Optional[Any]:
        try:
            row = self._db.get(KeyValueBlobORM, key)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load {key}: {e}") from e
        if row is None:
            return None
        try:
            return json.loads(row.payload)
        except ValueError as e:
            raise PersistenceError(f"Stored {key} is not valid JSON") from e

    def _write(self, key: str, documents: list[dict[str, Any]]) -> None:
        payload = json.dumps(documents, ensure_ascii=False)
        try:
            row = self._db.get(KeyValueBlobORM, key)
            if row:
                row.payload = payload
            else:
                self._db.add(KeyValueBlobORM(key=key, payload=payload))
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Failed to save {key}: {e}") from e
