import click

from didledger.commands.did import did
from didledger.commands.keys import keys
from didledger.commands.proof import proof
from didledger.commands.vdr import vdr


@click.group()
def cli():
    """didledger - DID document lifecycle on a multi-organization ledger"""
    pass


cli.add_command(did)
cli.add_command(proof)
cli.add_command(keys)
cli.add_command(vdr)


if __name__ == "__main__":
    cli()
