from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import ContextManager, Dict, Iterator, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from didledger.exceptions import TransportError
from didledger.logging import get_logger
from didledger.vdr.models import WorldStateEntry

"""
Per-transaction handles onto the ledger.

The DID core only ever talks to a `LedgerStub`: point reads and writes, an ascending
range scan, and the caller identity and timestamp of the transaction being executed.
Implementations report backend failures as `TransportError`.
"""

logger = get_logger(__name__)

GENESIS_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

StateRange = Iterator[Tuple[str, bytes]]


class LedgerStub(ABC):
    """The four ledger primitives available to one transaction."""

    @abstractmethod
    def get_state(self, key: str) -> Optional[bytes]:
        """Returns the value stored under `key`, or None if the key is absent."""

    @abstractmethod
    def put_state(self, key: str, value: bytes) -> None:
        """Stores `value` under `key`, replacing any previous value."""

    @abstractmethod
    def get_state_by_range(self, start_key: str, end_key: str) -> ContextManager[StateRange]:
        """Scans keys in [start_key, end_key) in ascending order. Empty bounds are open.

        Used as a context manager so the underlying cursor is released on every exit path.
        """

    @abstractmethod
    def get_tx_timestamp(self) -> datetime:
        """Timestamp of the current transaction, identical on every replica."""

    @abstractmethod
    def get_creator(self) -> bytes:
        """Serialized identity of the transaction submitter."""


def _in_range(key: str, start_key: str, end_key: str) -> bool:
    return (not start_key or key >= start_key) and (not end_key or key < end_key)


class MemoryLedger:
    """A dict-backed world state. Each `transaction()` call hands out a stub for one transaction.

    Without an explicit timestamp, transactions are stamped from a logical clock that starts
    at GENESIS_TIME and advances one second per transaction, so runs are reproducible.
    """

    def __init__(self, state: Optional[Dict[str, bytes]] = None):
        self.state: Dict[str, bytes] = dict(state or {})
        self.open_scans = 0
        self._tx_count = 0

    def transaction(self, creator: Union[bytes, str] = b"", timestamp: Optional[datetime] = None) -> "MemoryLedgerStub":
        if timestamp is None:
            timestamp = GENESIS_TIME + timedelta(seconds=self._tx_count)
        self._tx_count += 1
        if isinstance(creator, str):
            creator = creator.encode("utf-8")
        return MemoryLedgerStub(self, creator, timestamp)


class MemoryLedgerStub(LedgerStub):
    def __init__(self, ledger: MemoryLedger, creator: bytes, timestamp: datetime):
        self.ledger = ledger
        self.creator = creator
        self.timestamp = timestamp

    def get_state(self, key: str) -> Optional[bytes]:
        return self.ledger.state.get(key)

    def put_state(self, key: str, value: bytes) -> None:
        if not key:
            raise TransportError("Cannot put state under an empty key")
        self.ledger.state[key] = bytes(value)

    @contextmanager
    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[StateRange]:
        snapshot = sorted(
            (key, value) for key, value in self.ledger.state.items() if _in_range(key, start_key, end_key)
        )
        self.ledger.open_scans += 1
        try:
            yield iter(snapshot)
        finally:
            self.ledger.open_scans -= 1

    def get_tx_timestamp(self) -> datetime:
        return self.timestamp

    def get_creator(self) -> bytes:
        return self.creator


class SQLLedgerStub(LedgerStub):
    """Ledger stub over a SQLAlchemy session. Writes are flushed, not committed; see `sql_transaction`."""

    def __init__(self, db: Session, creator: bytes, timestamp: datetime):
        self.db = db
        self.creator = creator
        self.timestamp = timestamp

    def get_state(self, key: str) -> Optional[bytes]:
        try:
            entry = self.db.get(WorldStateEntry, key)
        except SQLAlchemyError as e:
            raise TransportError(f"Failed to read state for {key}: {e}") from e
        return entry.value if entry is not None else None

    def put_state(self, key: str, value: bytes) -> None:
        if not key:
            raise TransportError("Cannot put state under an empty key")
        try:
            self.db.merge(WorldStateEntry(key=key, value=bytes(value)))
            self.db.flush()
        except SQLAlchemyError as e:
            raise TransportError(f"Failed to write state for {key}: {e}") from e

    @contextmanager
    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[StateRange]:
        stmt = select(WorldStateEntry.key, WorldStateEntry.value).order_by(WorldStateEntry.key)
        if start_key:
            stmt = stmt.where(WorldStateEntry.key >= start_key)
        if end_key:
            stmt = stmt.where(WorldStateEntry.key < end_key)
        try:
            result = self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise TransportError(f"Failed to scan state: {e}") from e
        try:
            yield self._rows(result)
        finally:
            result.close()

    @staticmethod
    def _rows(result) -> StateRange:
        try:
            for key, value in result:
                yield key, value
        except SQLAlchemyError as e:
            raise TransportError(f"Failed to read next state entry: {e}") from e

    def get_tx_timestamp(self) -> datetime:
        return self.timestamp

    def get_creator(self) -> bytes:
        return self.creator


@contextmanager
def sql_transaction(db: Session, creator: Union[bytes, str], timestamp: datetime) -> Iterator[SQLLedgerStub]:
    """Runs one ledger transaction on `db`: commits if the body succeeds, rolls back otherwise."""
    if isinstance(creator, str):
        creator = creator.encode("utf-8")
    stub = SQLLedgerStub(db, creator, timestamp)
    try:
        yield stub
    except Exception:
        db.rollback()
        raise
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise TransportError(f"Failed to commit transaction: {e}") from e
