import json
from typing import Dict, Optional

import base58
import click
from nacl.signing import SigningKey
from pydantic import BaseModel, ValidationError

ED25519_MULTICODEC_PREFIX = bytes([0xed, 0x01])


class KeyFileModel(BaseModel):
    """On-disk form of an Ed25519 key pair, both halves multibase encoded."""
    publicKeyMultibase: str
    privateKeyMultibase: Optional[str] = None


def encode_multibase(data: bytes) -> str:
    """Multibase base58btc: a 'z' followed by the base58 encoding."""
    return "z" + base58.b58encode(data).decode("ascii")

def decode_multibase(value: str) -> bytes:
    if not value.startswith("z"):
        raise ValueError(f"Multibase value '{value}' must start with 'z'.")
    return base58.b58decode(value[1:])

def generate_key_pair() -> Dict[str, str]:
    """Generates a fresh Ed25519 key pair in key-file form."""
    signing_key = SigningKey.generate()
    return key_pair_data(signing_key)

def key_pair_data(signing_key: SigningKey) -> Dict[str, str]:
    return KeyFileModel(
        publicKeyMultibase=encode_multibase(ED25519_MULTICODEC_PREFIX + bytes(signing_key.verify_key)),
        privateKeyMultibase=encode_multibase(bytes(signing_key)),
    ).model_dump()

def sign_message(signing_key: SigningKey, message: str) -> str:
    """Signs the UTF-8 message and returns the detached signature in multibase form."""
    return encode_multibase(signing_key.sign(message.encode("utf-8")).signature)

def load_signing_key_from_file(key_file_path: str) -> Optional[SigningKey]:
    """Loads a signing key from a key JSON file."""
    try:
        with open(key_file_path, 'r') as f:
            key_data_from_file = json.load(f)

        key_model = KeyFileModel(**key_data_from_file)

        if not key_model.privateKeyMultibase:
            click.echo(click.style(f"Error: privateKeyMultibase not found in {key_file_path}.", fg="red"), err=True)
            return None

        return SigningKey(decode_multibase(key_model.privateKeyMultibase))

    except FileNotFoundError:
        click.echo(click.style(f"Error: Key file {key_file_path} not found.", fg="red"), err=True)
        return None
    except json.JSONDecodeError as e:
        click.echo(click.style(f"Error: Invalid JSON in key file {key_file_path}: {e}", fg="red"), err=True)
        return None
    except ValidationError as e:
        click.echo(click.style(f"Error: Key file {key_file_path} is invalid: {e}", fg="red"), err=True)
        return None
    except ValueError as e:
        click.echo(click.style(f"Error initializing signing key from {key_file_path}: {e}", fg="red"), err=True)
        return None
