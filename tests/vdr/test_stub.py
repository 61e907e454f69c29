from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from didledger.exceptions import CorruptionError, TransportError
from didledger.store import DIDRecordStore
from didledger.vdr.database import create_tables
from didledger.vdr.models import WorldStateEntry
from didledger.vdr.stub import GENESIS_TIME, MemoryLedger, SQLLedgerStub, sql_transaction

TX_TIME = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def test_memory_transactions_use_logical_clock():
    ledger = MemoryLedger()
    first = ledger.transaction(b"A")
    second = ledger.transaction("B")
    assert first.get_tx_timestamp() == GENESIS_TIME
    assert (second.get_tx_timestamp() - first.get_tx_timestamp()).total_seconds() == 1
    assert second.get_creator() == b"B"
    assert ledger.transaction(timestamp=TX_TIME).get_tx_timestamp() == TX_TIME


def test_memory_range_scan_bounds_and_order():
    ledger = MemoryLedger({"b": b"2", "a": b"1", "d": b"4", "c": b"3"})
    stub = ledger.transaction()

    with stub.get_state_by_range("", "") as results:
        assert [key for key, _ in results] == ["a", "b", "c", "d"]
    with stub.get_state_by_range("b", "d") as results:
        assert list(results) == [("b", b"2"), ("c", b"3")]
    assert ledger.open_scans == 0


def test_memory_range_scan_released_on_error():
    ledger = MemoryLedger({"a": b"1"})
    with pytest.raises(RuntimeError):
        with ledger.transaction().get_state_by_range("", ""):
            assert ledger.open_scans == 1
            raise RuntimeError("boom")
    assert ledger.open_scans == 0


def test_memory_put_rejects_empty_key():
    with pytest.raises(TransportError):
        MemoryLedger().transaction().put_state("", b"x")


def test_sql_stub_reads_writes_and_scans(session_factory):
    db = session_factory()
    with sql_transaction(db, "creator", TX_TIME) as stub:
        assert stub.get_state("did:example:b") is None
        stub.put_state("did:example:b", b"two")
        stub.put_state("did:example:a", b"one")
        stub.put_state("did:example:a", b"uno")
        assert stub.get_creator() == b"creator"
        assert stub.get_tx_timestamp() == TX_TIME
    db.close()

    db = session_factory()
    stub = SQLLedgerStub(db, b"", TX_TIME)
    assert stub.get_state("did:example:a") == b"uno"
    with stub.get_state_by_range("", "") as results:
        assert list(results) == [("did:example:a", b"uno"), ("did:example:b", b"two")]
    with stub.get_state_by_range("did:example:b", "") as results:
        assert [key for key, _ in results] == ["did:example:b"]
    db.close()


def test_sql_transaction_rolls_back_on_error(session_factory):
    db = session_factory()
    with pytest.raises(ValueError):
        with sql_transaction(db, b"", TX_TIME) as stub:
            stub.put_state("did:example:a", b"one")
            raise ValueError("validation failed after write")
    db.close()

    db = session_factory()
    assert db.get(WorldStateEntry, "did:example:a") is None
    db.close()


def test_sql_errors_become_transport_errors(mocker):
    db = mocker.MagicMock()
    db.get.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    db.merge.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
    db.execute.side_effect = OperationalError("SELECT", {}, Exception("no such table"))
    stub = SQLLedgerStub(db, b"", TX_TIME)

    with pytest.raises(TransportError) as excinfo:
        stub.get_state("did:example:a")
    assert isinstance(excinfo.value.__cause__, OperationalError)
    with pytest.raises(TransportError):
        stub.put_state("did:example:a", b"one")
    with pytest.raises(TransportError):
        with stub.get_state_by_range("", ""):
            pass


def test_sql_scan_closed_when_listing_hits_corrupt_record(mocker):
    result = mocker.MagicMock()
    result.__iter__.return_value = iter([("did:example:a", b"garbage")])
    db = mocker.MagicMock()
    db.execute.return_value = result
    stub = SQLLedgerStub(db, b"", TX_TIME)

    with pytest.raises(CorruptionError):
        DIDRecordStore().list_dids(stub)
    result.close.assert_called_once()
