import click

from didledger.auth import digest_proof, recovery_message, update_message
from didledger.utils import load_signing_key_from_file, sign_message


@click.group("proof")
def proof():
    """Compute proofs that authorize DID updates and recoveries"""
    pass


def _message(did_value: str, document: str, version: int, recovery: bool) -> str:
    build = recovery_message if recovery else update_message
    return build(did_value, document, version)


@proof.command("digest")
@click.option("--did", "did_value", required=True, help="DID being mutated.")
@click.option("--document", required=True, help="New DID document JSON, exactly as it will be submitted.")
@click.option("--version", "version", type=int, required=True, help="Version the mutation will produce (current version + 1).")
@click.option("--key", required=True, help="The update or recovery key registered on the DID.")
@click.option("--recovery", is_flag=True, help="Compute a recovery proof instead of an update proof.")
def digest(did_value: str, document: str, version: int, key: str, recovery: bool):
    """Computes a proof for the default digest scheme."""
    click.echo(digest_proof(_message(did_value, document, version, recovery), key))


@proof.command("sign")
@click.option("--did", "did_value", required=True, help="DID being mutated.")
@click.option("--document", required=True, help="New DID document JSON, exactly as it will be submitted.")
@click.option("--version", "version", type=int, required=True, help="Version the mutation will produce (current version + 1).")
@click.option(
    "--key-file",
    "key_file_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    required=True,
    help="Key pair JSON file, as written by `keys generate`.",
)
@click.option("--recovery", is_flag=True, help="Sign a recovery instead of an update.")
def sign(did_value: str, document: str, version: int, key_file_path: str, recovery: bool):
    """Signs a mutation with an Ed25519 key for the ed25519 scheme."""
    signing_key = load_signing_key_from_file(key_file_path)
    if not signing_key:
        return
    click.echo(sign_message(signing_key, _message(did_value, document, version, recovery)))
