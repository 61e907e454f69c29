from click.testing import CliRunner

from didledger.cli import cli


def test_cli_group():
    """Test the main CLI group."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "didledger - DID document lifecycle on a multi-organization ledger" in result.output
    assert "did" in result.output
    assert "proof" in result.output
    assert "keys" in result.output
    assert "vdr" in result.output
