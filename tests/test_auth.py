import pytest
from nacl.signing import SigningKey

from didledger.auth import (
    DigestProofValidator,
    Ed25519ProofValidator,
    digest_proof,
    get_proof_validator,
    recovery_message,
    update_message,
)
from didledger.utils import encode_multibase, key_pair_data, sign_message


def test_messages():
    assert update_message("did:example:1", '{"a":2}', 2) == 'did:example:1:{"a":2}:2'
    assert recovery_message("did:example:1", '{"a":3}', 2) == 'did:example:1:recovery:{"a":3}:2'


def test_digest_proof_is_sha256_prefix():
    # sha256('did:example:1:{"a":2}:2K') = 0e5e663e36c967b1...
    assert digest_proof(update_message("did:example:1", '{"a":2}', 2), "K") == "0e5e663e36c967b1"
    # sha256('did:example:1:recovery:{"a":3}:2R') = 74180232cd7381af...
    assert digest_proof(recovery_message("did:example:1", '{"a":3}', 2), "R") == "74180232cd7381af"


def test_digest_validator_accepts_embedded_prefix():
    validator = DigestProofValidator()
    message = update_message("did:example:1", '{"a":2}', 2)
    assert validator.validate(message, "0e5e663e36c967b1", "K")
    assert validator.validate(message, "prefix:0e5e663e36c967b16173a821aeb178c5:suffix", "K")


def test_digest_validator_rejects():
    validator = DigestProofValidator()
    message = update_message("did:example:1", '{"a":2}', 2)
    assert not validator.validate(message, "0e5e663e36c967b", "K")
    assert not validator.validate(message, "0E5E663E36C967B1", "K")
    assert not validator.validate(message, "0e5e663e36c967b1", "other")
    assert not validator.validate(message, "", "K")
    assert not validator.validate(message, None, "K")
    assert not validator.validate(message, "0e5e663e36c967b1", "")
    assert not validator.validate(message, "0e5e663e36c967b1", None)
    assert not validator.validate("", digest_proof("", "K"), "K")


def make_signing_key():
    return SigningKey(bytes(range(32)))


def test_ed25519_validator_accepts_signature():
    signing_key = make_signing_key()
    public_key = key_pair_data(signing_key)["publicKeyMultibase"]
    message = update_message("did:example:1", '{"a":2}', 2)

    assert Ed25519ProofValidator().validate(message, sign_message(signing_key, message), public_key)


def test_ed25519_validator_accepts_raw_public_key():
    signing_key = make_signing_key()
    public_key = encode_multibase(bytes(signing_key.verify_key))
    message = recovery_message("did:example:1", "{}", 5)

    assert Ed25519ProofValidator().validate(message, sign_message(signing_key, message), public_key)


def test_ed25519_validator_rejects_without_raising():
    validator = Ed25519ProofValidator()
    signing_key = make_signing_key()
    public_key = key_pair_data(signing_key)["publicKeyMultibase"]
    message = update_message("did:example:1", '{"a":2}', 2)
    proof = sign_message(signing_key, message)

    assert not validator.validate(update_message("did:example:1", '{"a":2}', 3), proof, public_key)
    assert not validator.validate(message, proof, key_pair_data(SigningKey(bytes(32)))["publicKeyMultibase"])
    assert not validator.validate(message, proof[:-4], public_key)
    assert not validator.validate(message, proof[1:], public_key)
    assert not validator.validate(message, "z0OIl", public_key)
    assert not validator.validate(message, proof, "zabc")
    assert not validator.validate(message, proof, public_key[1:])
    assert not validator.validate(message, "", public_key)
    assert not validator.validate(message, proof, None)


def test_get_proof_validator():
    assert isinstance(get_proof_validator("digest"), DigestProofValidator)
    assert isinstance(get_proof_validator("Ed25519"), Ed25519ProofValidator)
    with pytest.raises(ValueError):
        get_proof_validator("rsa")


@pytest.mark.parametrize("validator", [DigestProofValidator(), Ed25519ProofValidator()])
@pytest.mark.parametrize(
    "message, proof, key",
    [
        ("m", b"abc", "K"),
        ("m", 123, "K"),
        ("m", "zabc", b"K"),
        (None, "zabc", "K"),
        (["m"], "zabc", "K"),
    ],
)
def test_validators_reject_non_string_input(validator, message, proof, key):
    assert validator.validate(message, proof, key) is False
