from datetime import datetime
from typing import Callable, List, Optional

from didledger.auth import DigestProofValidator, ProofValidator, recovery_message, update_message
from didledger.exceptions import AlreadyExistsError, CorruptionError, InvalidArgumentError, NotFoundError, UnauthorizedError
from didledger.identity import IdentityResolver, MarkerIdentityResolver
from didledger.logging import get_logger
from didledger.models import DIDRecord
from didledger.vdr.stub import LedgerStub

"""
The DID record state machine.

`DIDRecordStore` applies create, update, recover, get and list against a ledger stub.
Every operation takes the stub for the current transaction as its first argument and
performs at most one read-modify-write; the store itself holds no per-transaction state.
"""

logger = get_logger(__name__)

MessageBuilder = Callable[[str, str, int], str]


class DIDRecordStore:
    def __init__(
        self,
        validator: Optional[ProofValidator] = None,
        resolver: Optional[IdentityResolver] = None,
    ):
        self.validator = validator or DigestProofValidator()
        self.resolver = resolver or MarkerIdentityResolver.from_settings()

    def create_did(
        self,
        stub: LedgerStub,
        did: str,
        long_form_did: str,
        document: str,
        update_key: Optional[str] = None,
        recovery_key: Optional[str] = None,
    ) -> DIDRecord:
        """Anchors a new DID record at version 1, attributed to the submitting organization."""
        _require_did(did)
        if stub.get_state(did) is not None:
            logger.warning(f"Rejected create of existing DID {did}")
            raise AlreadyExistsError(f"DID {did} already exists")

        tx_time = stub.get_tx_timestamp()
        created_by = self.resolver.resolve(stub.get_creator())
        record = DIDRecord(
            did=did,
            longFormDid=long_form_did,
            document=document,
            createdAt=tx_time,
            updatedAt=tx_time,
            version=1,
            updateKey=update_key or None,
            recoveryKey=recovery_key or None,
            createdBy=created_by,
            endorsedBy=[created_by],
        )
        stub.put_state(did, record.to_bytes())
        logger.info(f"Created DID {did} for {created_by}")
        return record

    def update_did(self, stub: LedgerStub, did: str, document: str, proof: Optional[str]) -> DIDRecord:
        """Replaces the document of an existing DID. Needs a proof under `updateKey` if one is registered."""
        return self._mutate(
            stub, did, document, proof, "updateKey", update_message, "update",
            "Invalid operation signature for update",
        )

    def recover_did(self, stub: LedgerStub, did: str, document: str, proof: Optional[str]) -> DIDRecord:
        """Replaces the document and marks the DID recovered. Needs a proof under `recoveryKey` if one is registered."""
        return self._mutate(
            stub, did, document, proof, "recoveryKey", recovery_message, "recovery",
            "Invalid recovery signature", _mark_recovered,
        )

    def get_did(self, stub: LedgerStub, did: str) -> DIDRecord:
        _require_did(did)
        return self._load(stub, did)

    def list_dids(self, stub: LedgerStub) -> List[DIDRecord]:
        """Returns every record in ascending key order.

        A record that fails to decode aborts the whole listing with CorruptionError.
        """
        records = []
        with stub.get_state_by_range("", "") as results:
            for key, value in results:
                try:
                    records.append(DIDRecord.from_bytes(key, value))
                except CorruptionError:
                    logger.error(f"Aborting DID listing on undecodable record {key}")
                    raise
        return records

    def _load(self, stub: LedgerStub, did: str) -> DIDRecord:
        raw = stub.get_state(did)
        if raw is None:
            raise NotFoundError(f"DID {did} does not exist")
        return DIDRecord.from_bytes(did, raw)

    def _mutate(
        self,
        stub: LedgerStub,
        did: str,
        document: str,
        proof: Optional[str],
        key_field: str,
        build_message: MessageBuilder,
        operation: str,
        rejection: str,
        post_effect: Optional[Callable[[DIDRecord, datetime], None]] = None,
    ) -> DIDRecord:
        _require_did(did)
        record = self._load(stub, did)
        tx_time = stub.get_tx_timestamp()
        next_version = record.version + 1

        key = getattr(record, key_field)
        if key:
            message = build_message(did, document, next_version)
            if not self.validator.validate(message, proof, key):
                logger.warning(f"Rejected {operation} of DID {did}: invalid proof for version {next_version}")
                raise UnauthorizedError(rejection)

        mutator = self.resolver.resolve(stub.get_creator())

        record.document = document
        record.updatedAt = tx_time
        record.version = next_version
        if post_effect is not None:
            post_effect(record, tx_time)
        record.endorse(mutator)

        stub.put_state(did, record.to_bytes())
        logger.info(f"Applied {operation} to DID {did} by {mutator}, now at version {record.version}")
        return record


def _mark_recovered(record: DIDRecord, tx_time: datetime) -> None:
    record.recovered = True
    record.recoveredAt = tx_time

def _require_did(did: str) -> None:
    if not did:
        raise InvalidArgumentError("DID must not be empty")
