from datetime import datetime, timezone
from typing import Callable, Dict, List, TypeVar

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from didledger.auth import get_proof_validator
from didledger.config import settings
from didledger.dispatcher import Dispatcher, Response, network_info, version_info
from didledger.exceptions import DIDLedgerError
from didledger.identity import MarkerIdentityResolver
from didledger.logging import get_logger
from didledger.store import DIDRecordStore
from didledger.vdr import schemas as vdr_schemas
from didledger.vdr.database import get_db
from didledger.vdr.stub import SQLLedgerStub, sql_transaction

logger = get_logger(__name__)

T = TypeVar("T")

STATUS_BY_KIND = {
    "InvalidArgument": 400,
    "Unauthorized": 403,
    "NotFound": 404,
    "AlreadyExists": 409,
    "Corruption": 500,
    "Transport": 503,
}

router = APIRouter(
    tags=["DID Ledger"],
)

def get_store() -> DIDRecordStore:
    """Dependency building the DID store from the configured proof scheme and organizations."""
    return DIDRecordStore(
        validator=get_proof_validator(settings.proof_scheme),
        resolver=MarkerIdentityResolver.from_settings(settings),
    )

def get_creator(x_creator_identity: str = Header("")) -> str:
    """The submitter's serialized identity, as presented by the client."""
    return x_creator_identity

def submit(db: Session, creator: str, operation: Callable[[SQLLedgerStub], T]) -> T:
    """Executes `operation` as one ledger transaction, stamped once with the gateway's clock.

    Ledger errors are turned into HTTP errors with the matching status code.
    """
    timestamp = datetime.now(timezone.utc)
    try:
        with sql_transaction(db, creator, timestamp) as stub:
            return operation(stub)
    except DIDLedgerError as e:
        raise HTTPException(status_code=STATUS_BY_KIND.get(e.kind, 500), detail=f"{e.kind}: {e.message}")

@router.post("/invoke", response_model=Response)
async def invoke(
    request: vdr_schemas.InvokeRequest,
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """
    Submits a named operation with positional string arguments, as a ledger client would.

    Failures are reported in the response body (status 500) rather than as HTTP errors.
    """
    dispatcher = Dispatcher(store, settings)
    return submit(db, creator, lambda stub: dispatcher.invoke(stub, request.function, request.args))

@router.post("/dids", response_model=Dict, status_code=201)
async def create_did(
    request: vdr_schemas.CreateDIDRequest,
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """Anchors a new DID document."""
    record = submit(db, creator, lambda stub: store.create_did(
        stub, request.did, request.longFormDid, request.document, request.updateKey, request.recoveryKey
    ))
    return record.to_dict()

@router.put("/dids/{did}", response_model=Dict)
async def update_did(
    did: str,
    request: vdr_schemas.MutateDIDRequest,
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """Replaces the document of an existing DID."""
    record = submit(db, creator, lambda stub: store.update_did(stub, did, request.document, request.proof))
    return record.to_dict()

@router.post("/dids/{did}/recover", response_model=Dict)
async def recover_did(
    did: str,
    request: vdr_schemas.MutateDIDRequest,
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """Recovers a DID with a new document, marking it recovered."""
    record = submit(db, creator, lambda stub: store.recover_did(stub, did, request.document, request.proof))
    return record.to_dict()

@router.get("/dids/{did}", response_model=Dict)
async def get_did(
    did: str,
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """Retrieves a DID record by its short-form DID."""
    return submit(db, creator, lambda stub: store.get_did(stub, did)).to_dict()

@router.get("/dids", response_model=List[Dict])
async def list_dids(
    db: Session = Depends(get_db),
    creator: str = Depends(get_creator),
    store: DIDRecordStore = Depends(get_store),
):
    """Lists every anchored DID record in key order."""
    records = submit(db, creator, store.list_dids)
    return [record.to_dict() for record in records]

@router.get("/version", response_model=Dict)
async def get_version():
    return version_info(settings)

@router.get("/network", response_model=Dict)
async def get_network_info():
    return network_info(settings)
