import json
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from didledger.config import Settings, settings as default_settings
from didledger.exceptions import DIDLedgerError, InvalidArgumentError
from didledger.logging import get_logger
from didledger.models import records_to_json
from didledger.store import DIDRecordStore
from didledger.vdr.stub import LedgerStub

logger = get_logger(__name__)

OK = 200
ERROR = 500


class Response(BaseModel):
    """Outcome of one invocation, shaped like a ledger peer response."""
    status: int
    message: str = ""
    payload: Optional[str] = None

    @classmethod
    def success(cls, payload: str) -> "Response":
        return cls(status=OK, payload=payload)

    @classmethod
    def error(cls, message: str) -> "Response":
        return cls(status=ERROR, message=message)

    @property
    def ok(self) -> bool:
        return self.status == OK


class Dispatcher:
    """Routes a named operation and its string arguments to the DID record store."""

    def __init__(self, store: Optional[DIDRecordStore] = None, settings: Optional[Settings] = None):
        self.store = store or DIDRecordStore()
        self.settings = settings or default_settings
        self._handlers: Dict[str, Callable[[LedgerStub, List[str]], str]] = {
            "InitLedger": self.init_ledger,
            "CreateDID": self.create_did,
            "UpdateDID": self.update_did,
            "RecoverDID": self.recover_did,
            "GetDID": self.get_did,
            "ListDIDs": self.list_dids,
            "GetVersion": self.get_version,
            "GetNetworkInfo": self.get_network_info,
        }

    def invoke(self, stub: LedgerStub, function: str, args: Optional[List[str]] = None) -> Response:
        handler = self._handlers.get(function)
        if handler is None:
            return Response.error("Invalid function name")
        try:
            return Response.success(handler(stub, list(args or [])))
        except DIDLedgerError as e:
            logger.info(f"{function} failed with {e.kind}: {e.message}")
            return Response.error(f"{e.kind}: {e.message}")

    def init_ledger(self, stub: LedgerStub, args: List[str]) -> str:
        names = ", ".join(f"{org.name} ({org.msp_id})" for org in self.settings.organizations)
        logger.info(f"DID ledger v{self.settings.ledger_version} initialized for {self.settings.network_type} network")
        logger.info(f"Supporting {names}")
        return f"DID ledger v{self.settings.ledger_version} initialized successfully"

    def create_did(self, stub: LedgerStub, args: List[str]) -> str:
        if len(args) < 3 or len(args) > 5:
            raise InvalidArgumentError(
                "Incorrect number of arguments. Expecting 3-5: did, longFormDid, documentJSON, [updateKey], [recoveryKey]"
            )
        update_key = args[3] if len(args) >= 4 else None
        recovery_key = args[4] if len(args) >= 5 else None
        return self.store.create_did(stub, args[0], args[1], args[2], update_key, recovery_key).to_json()

    def update_did(self, stub: LedgerStub, args: List[str]) -> str:
        if len(args) != 3:
            raise InvalidArgumentError(
                "Incorrect number of arguments. Expecting 3: did, updatedDocumentJSON, operationSignature"
            )
        return self.store.update_did(stub, args[0], args[1], args[2]).to_json()

    def recover_did(self, stub: LedgerStub, args: List[str]) -> str:
        if len(args) != 3:
            raise InvalidArgumentError(
                "Incorrect number of arguments. Expecting 3: did, newDocumentJSON, recoverySignature"
            )
        return self.store.recover_did(stub, args[0], args[1], args[2]).to_json()

    def get_did(self, stub: LedgerStub, args: List[str]) -> str:
        if len(args) != 1:
            raise InvalidArgumentError("Incorrect number of arguments. Expecting 1: did")
        return self.store.get_did(stub, args[0]).to_json()

    def list_dids(self, stub: LedgerStub, args: List[str]) -> str:
        return records_to_json(self.store.list_dids(stub))

    def get_version(self, stub: LedgerStub, args: List[str]) -> str:
        return json.dumps(version_info(self.settings))

    def get_network_info(self, stub: LedgerStub, args: List[str]) -> str:
        return json.dumps(network_info(self.settings))


def version_info(settings: Settings) -> Dict[str, str]:
    return {
        "version": settings.ledger_version,
        "description": settings.ledger_description,
        "organizations": ", ".join(f"{org.name} ({org.msp_id})" for org in settings.organizations),
    }

def network_info(settings: Settings) -> Dict[str, object]:
    return {
        "ledger_version": settings.ledger_version,
        "network_type": settings.network_type,
        "organizations": [
            {"name": org.name, "msp_id": org.msp_id, "peer": org.peer}
            for org in settings.organizations
        ],
        "channel": settings.channel,
        "endorsement_policy": settings.endorsement_policy,
    }
