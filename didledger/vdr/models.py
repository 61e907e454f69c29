from sqlalchemy import Column, LargeBinary, String

from didledger.vdr.database import Base

class WorldStateEntry(Base):
    """One key of the ledger's world state. Values are opaque bytes."""
    __tablename__ = "world_state"

    key = Column(String, primary_key=True, index=True, unique=True, nullable=False)
    value = Column(LargeBinary, nullable=False)

    def __repr__(self):
        return f"<WorldStateEntry(key='{self.key}', size={len(self.value or b'')})>"
