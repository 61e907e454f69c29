import json
from typing import Optional

import click

from didledger.utils import generate_key_pair


@click.group("keys")
def keys():
    """Create Ed25519 keys for approving DID updates and recoveries"""
    pass


@keys.command("generate")
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    help="Output file for the key pair (JSON).",
)
def generate_key(output_file: Optional[str]):
    """Generates a new Ed25519 key pair in multibase form."""
    key_data = generate_key_pair()
    click.echo(click.style(f"Public key: {key_data['publicKeyMultibase']}", fg="cyan"))
    click.echo(
        click.style(
            "Register it with `did create --update-key` or `--recovery-key` (requires proof_scheme: ed25519).",
            fg="yellow",
        )
    )

    if output_file:
        with open(output_file, "w") as f:
            json.dump(key_data, f, indent=2)
        click.echo(click.style(f"Key pair saved in JSON format to {output_file}", fg="green"))
    else:
        click.echo(json.dumps(key_data, indent=2))
