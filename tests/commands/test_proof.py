import json

from click.testing import CliRunner
from nacl.signing import SigningKey

from didledger.auth import Ed25519ProofValidator, recovery_message, update_message
from didledger.commands.proof import proof
from didledger.utils import key_pair_data


def test_digest_update_proof():
    """Test `proof digest` for an update."""
    runner = CliRunner()
    result = runner.invoke(proof, [
        "digest", "--did", "did:example:1", "--document", '{"a":2}', "--version", "2", "--key", "K",
    ])

    assert result.exit_code == 0
    assert result.output.strip() == "0e5e663e36c967b1"


def test_digest_recovery_proof():
    """Test `proof digest --recovery`."""
    runner = CliRunner()
    result = runner.invoke(proof, [
        "digest", "--did", "did:example:1", "--document", '{"a":3}', "--version", "2", "--key", "R", "--recovery",
    ])

    assert result.exit_code == 0
    assert result.output.strip() == "74180232cd7381af"


def test_sign_produces_verifiable_proof(tmp_path):
    """Test `proof sign` with a key file written by `keys generate`."""
    key_data = key_pair_data(SigningKey(bytes(range(32))))
    key_file = tmp_path / "key.json"
    key_file.write_text(json.dumps(key_data))

    runner = CliRunner()
    result = runner.invoke(proof, [
        "sign", "--did", "did:example:1", "--document", "{}", "--version", "4", "--key-file", str(key_file), "--recovery",
    ])

    assert result.exit_code == 0
    signature = result.output.strip()
    validator = Ed25519ProofValidator()
    assert validator.validate(recovery_message("did:example:1", "{}", 4), signature, key_data["publicKeyMultibase"])
    assert not validator.validate(update_message("did:example:1", "{}", 4), signature, key_data["publicKeyMultibase"])


def test_sign_with_public_only_key_file(tmp_path):
    key_file = tmp_path / "key.json"
    key_file.write_text(json.dumps({"publicKeyMultibase": "z6Mkt"}))

    runner = CliRunner()
    result = runner.invoke(proof, [
        "sign", "--did", "did:example:1", "--document", "{}", "--version", "2", "--key-file", str(key_file),
    ])

    assert result.exit_code == 0
    assert "privateKeyMultibase not found" in result.output


def test_sign_with_invalid_key_file(tmp_path):
    key_file = tmp_path / "key.json"
    key_file.write_text("{not json")

    runner = CliRunner()
    result = runner.invoke(proof, [
        "sign", "--did", "did:example:1", "--document", "{}", "--version", "2", "--key-file", str(key_file),
    ])

    assert "Invalid JSON in key file" in result.output
