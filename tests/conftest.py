import os

# Keep the module-level engine off the working directory during tests
os.environ.setdefault("DIDLEDGER_DATABASE_URL", "sqlite://")

import pytest

from didledger.identity import MarkerIdentityResolver
from didledger.store import DIDRecordStore
from didledger.vdr.stub import MemoryLedger

COMPANY_A_MSP = "m-FQEEX22AZNEGDDJL4WCQP6KYHU"
COMPANY_B_MSP = "m-JLGL2ZEX6BDIXIEFYD4RJVZSTI"

COMPANY_A = f"-----BEGIN CERTIFICATE-----\nOU=client,O={COMPANY_A_MSP}\n-----END CERTIFICATE-----".encode()
COMPANY_B = f"-----BEGIN CERTIFICATE-----\nOU=client,O={COMPANY_B_MSP}\n-----END CERTIFICATE-----".encode()
OUTSIDER = b"-----BEGIN CERTIFICATE-----\nOU=client,O=m-SOMEONEELSE\n-----END CERTIFICATE-----"


@pytest.fixture
def ledger():
    return MemoryLedger()


@pytest.fixture
def resolver():
    return MarkerIdentityResolver({COMPANY_A_MSP: "CompanyA", COMPANY_B_MSP: "CompanyB"})


@pytest.fixture
def store(resolver):
    return DIDRecordStore(resolver=resolver)
