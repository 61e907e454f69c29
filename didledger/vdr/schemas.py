from typing import List, Optional

from pydantic import BaseModel, Field


class InvokeRequest(BaseModel):
    function: str
    args: List[str] = Field(default_factory=list)

class CreateDIDRequest(BaseModel):
    did: str
    longFormDid: str
    document: str
    updateKey: Optional[str] = None
    recoveryKey: Optional[str] = None

class MutateDIDRequest(BaseModel):
    """Body of an update or a recovery. `proof` may be omitted when no key is registered."""
    document: str
    proof: str = ""
