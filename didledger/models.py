import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_serializer

from didledger.exceptions import CorruptionError


class DIDRecord(BaseModel):
    """A DID document anchored on the ledger, keyed by its short-form DID.

    Optional fields are `None` while unset and are left out of the wire form.
    `recovered` and `endorsedBy` are likewise left out while false or empty.
    """
    did: str
    longFormDid: str
    document: str
    createdAt: datetime
    updatedAt: datetime
    version: int = Field(ge=1)
    recovered: bool = False
    recoveredAt: Optional[datetime] = None
    updateKey: Optional[str] = None
    recoveryKey: Optional[str] = None
    createdBy: Optional[str] = None
    endorsedBy: List[str] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler) -> Dict[str, Any]:
        data = handler(self)
        for name in ("recovered", "endorsedBy"):
            if name in data and not data[name]:
                del data[name]
        return data

    def endorse(self, organization: str) -> None:
        """Adds an organization to `endorsedBy` unless it is already there."""
        if organization not in self.endorsedBy:
            self.endorsedBy.append(organization)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def to_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, key: str, raw: bytes) -> "DIDRecord":
        """Decodes a stored record, raising CorruptionError if it is not a valid DIDRecord."""
        try:
            return cls.model_validate_json(raw)
        except ValueError as e:
            raise CorruptionError(f"Failed to decode DID record stored under {key}: {e}") from e


def records_to_json(records: List[DIDRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], separators=(",", ":"))
