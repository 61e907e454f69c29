import hashlib
from typing import Optional, Protocol

import base58
from nacl.exceptions import CryptoError
from nacl.signing import VerifyKey

from didledger.logging import get_logger

"""
Proof validation for DID mutations.

A `ProofValidator` decides whether a caller-supplied proof authorizes a mutation of a
record whose update or recovery key is registered. Validators are pure: they return a
boolean and never raise on malformed input.
"""

logger = get_logger(__name__)

DIGEST_PREFIX_LENGTH = 16


class ProofValidator(Protocol):
    def validate(self, message: str, proof: Optional[str], key: Optional[str]) -> bool:
        ...


def update_message(did: str, document: str, version: int) -> str:
    """Message an update proof is checked against; `version` is the version being written."""
    return f"{did}:{document}:{version}"

def recovery_message(did: str, document: str, version: int) -> str:
    """Message a recovery proof is checked against; `version` is the version being written."""
    return f"{did}:recovery:{document}:{version}"

def digest_proof(message: str, key: str) -> str:
    """Returns the shortest proof accepted by `DigestProofValidator` for this message and key."""
    digest = hashlib.sha256((message + key).encode("utf-8")).hexdigest()
    return digest[:DIGEST_PREFIX_LENGTH]


class DigestProofValidator:
    """Placeholder scheme: the proof must contain the first 16 hex chars of sha256(message + key).

    This is not a signature scheme. It is kept for compatibility with records and clients
    that already produce proofs in this form.
    """

    def validate(self, message: str, proof: Optional[str], key: Optional[str]) -> bool:
        if not all(isinstance(value, str) and value for value in (message, proof, key)):
            return False
        return digest_proof(message, key) in proof


class Ed25519ProofValidator:
    """Verifies an Ed25519 signature over the UTF-8 message.

    `key` is a multibase ('z' + base58btc) public key, optionally carrying the 0xed01
    multicodec prefix. `proof` is the 64-byte signature, also in multibase form.
    """

    def validate(self, message: str, proof: Optional[str], key: Optional[str]) -> bool:
        if not all(isinstance(value, str) and value for value in (message, proof, key)):
            return False
        if not proof.startswith("z"):
            return False
        try:
            verify_key = get_verify_key_from_multibase(key)
            signature = base58.b58decode(proof[1:])
            verify_key.verify(message.encode("utf-8"), signature)
        except (ValueError, TypeError, CryptoError) as e:
            logger.debug(f"Ed25519 proof rejected: {e}")
            return False
        return True


def get_verify_key_from_multibase(pk_multibase: str) -> VerifyKey:
    """Decodes a base58btc-encoded Ed25519 public key (multibase 'z' prefix)
    and returns a PyNaCl VerifyKey object.
    Handles the common multicodec prefixes for Ed25519 public keys.
    """
    if not pk_multibase:
        raise ValueError("Public key multibase string cannot be empty.")
    if not pk_multibase.startswith('z'):
        raise ValueError(f"Ed25519 publicKeyMultibase '{pk_multibase}' must start with 'z'.")

    multicodec_pubkey = base58.b58decode(pk_multibase[1:])

    # 0xed01 + 32 bytes is the canonical multicodec form
    if multicodec_pubkey.startswith(bytes([0xed, 0x01])) and len(multicodec_pubkey) == 34:
        public_key_bytes = multicodec_pubkey[2:]
    elif multicodec_pubkey.startswith(bytes([0xed])) and len(multicodec_pubkey) == 33:
        public_key_bytes = multicodec_pubkey[1:]
    elif len(multicodec_pubkey) == 32:
        public_key_bytes = multicodec_pubkey
    else:
        raise ValueError(f"Invalid Ed25519 multicodec prefix or key length in publicKeyMultibase '{pk_multibase}'. Decoded length: {len(multicodec_pubkey)} bytes.")

    return VerifyKey(public_key_bytes)


PROOF_VALIDATORS = {
    "digest": DigestProofValidator,
    "ed25519": Ed25519ProofValidator,
}

def get_proof_validator(scheme: str) -> ProofValidator:
    """Returns a validator for the named scheme ('digest' or 'ed25519')."""
    try:
        return PROOF_VALIDATORS[scheme.lower()]()
    except KeyError:
        raise ValueError(f"Unknown proof scheme '{scheme}'. Expected one of: {', '.join(PROOF_VALIDATORS)}.")
