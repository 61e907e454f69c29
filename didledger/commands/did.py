import json
from typing import Optional
from urllib.parse import quote

import click
import httpx

from didledger.config import settings

DEFAULT_VDR_URL = f"http://{settings.host}:{settings.port}/api/v1"

vdr_url_option = click.option(
    "--vdr-url",
    default=DEFAULT_VDR_URL,
    show_default=True,
    help="Base URL of the DID ledger API.",
)
identity_option = click.option(
    "--identity",
    default="",
    envvar="DIDLEDGER_IDENTITY",
    help="Serialized submitter identity sent as X-Creator-Identity (e.g. a certificate containing your MSP id).",
)


@click.group("did")
def did():
    """Anchor, update, recover and read DID documents on the ledger"""
    pass


def _read_document(document: Optional[str], document_file: Optional[str]) -> Optional[str]:
    if document and document_file:
        click.echo(
            click.style("Error: --document and --document-file are mutually exclusive.", fg="red"),
            err=True,
        )
        return None
    if document_file:
        with open(document_file, "r") as f:
            return f.read().strip()
    if not document:
        click.echo(
            click.style("Error: one of --document or --document-file is required.", fg="red"),
            err=True,
        )
        return None
    return document


def _did_url(vdr_url: str, did_value: str, suffix: str = "") -> str:
    """Builds the gateway URL of one DID. `%` in the DID is escaped so it reaches the server unchanged."""
    return f"{vdr_url.rstrip('/')}/dids/{quote(did_value, safe=':')}{suffix}"


def _send(method: str, url: str, identity: str, action: str, payload: Optional[dict] = None):
    """Sends one request to the gateway and prints the JSON body, or a red error line on failure."""
    headers = {"X-Creator-Identity": identity} if identity else {}
    try:
        if method == "get":
            response = httpx.get(url, headers=headers)
        elif method == "put":
            response = httpx.put(url, json=payload, headers=headers)
        else:
            response = httpx.post(url, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        message = f"Failed to {action}: HTTP {e.response.status_code}."
        try:
            error_detail = e.response.json().get("detail", e.response.text)
            message += f"\nDetails: {error_detail}"
        except json.JSONDecodeError:
            message += f"\nResponse: {e.response.text}"
        click.echo(click.style(message, fg="red"), err=True)
        return None
    except httpx.RequestError as e:
        click.echo(
            click.style(f"HTTP request error while trying to {action}: {e}", fg="red"),
            err=True,
        )
        return None

    try:
        body = response.json()
    except json.JSONDecodeError:
        click.echo(click.style(f"Could not decode JSON response: {response.text}", fg="red"), err=True)
        return None
    click.echo(json.dumps(body, indent=2))
    return body


@did.command("create")
@click.option("--did", "did_value", required=True, help="Short-form DID to anchor.")
@click.option("--long-form-did", required=True, help="Long-form variant of the DID.")
@click.option("--document", help="DID document JSON.")
@click.option(
    "--document-file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to the DID document JSON file.",
)
@click.option("--update-key", default=None, help="Public key that must approve future updates.")
@click.option("--recovery-key", default=None, help="Public key that must approve recovery.")
@vdr_url_option
@identity_option
def create_did(did_value, long_form_did, document, document_file, update_key, recovery_key, vdr_url, identity):
    """Anchors a new DID document."""
    document = _read_document(document, document_file)
    if document is None:
        return
    payload = {
        "did": did_value,
        "longFormDid": long_form_did,
        "document": document,
        "updateKey": update_key,
        "recoveryKey": recovery_key,
    }
    if _send("post", f"{vdr_url.rstrip('/')}/dids", identity, "create DID", payload) is not None:
        click.echo(click.style(f"DID {did_value} anchored successfully!", fg="green"))


@did.command("update")
@click.option("--did", "did_value", required=True, help="DID to update.")
@click.option("--document", help="New DID document JSON.")
@click.option(
    "--document-file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to the new DID document JSON file.",
)
@click.option("--proof", default="", help="Proof under the registered update key, if any.")
@vdr_url_option
@identity_option
def update_did(did_value, document, document_file, proof, vdr_url, identity):
    """Replaces the document of an anchored DID."""
    document = _read_document(document, document_file)
    if document is None:
        return
    url = _did_url(vdr_url, did_value)
    body = _send("put", url, identity, "update DID", {"document": document, "proof": proof})
    if body is not None:
        click.echo(click.style(f"DID {did_value} updated to version {body.get('version')}.", fg="green"))


@did.command("recover")
@click.option("--did", "did_value", required=True, help="DID to recover.")
@click.option("--document", help="Replacement DID document JSON.")
@click.option(
    "--document-file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to the replacement DID document JSON file.",
)
@click.option("--proof", default="", help="Proof under the registered recovery key, if any.")
@vdr_url_option
@identity_option
def recover_did(did_value, document, document_file, proof, vdr_url, identity):
    """Recovers a DID with a replacement document."""
    document = _read_document(document, document_file)
    if document is None:
        return
    url = _did_url(vdr_url, did_value, "/recover")
    body = _send("post", url, identity, "recover DID", {"document": document, "proof": proof})
    if body is not None:
        click.echo(click.style(f"DID {did_value} recovered at version {body.get('version')}.", fg="green"))


@did.command("get")
@click.option("--did", "did_value", required=True, help="DID to fetch.")
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    help="Save the fetched record to a file.",
)
@vdr_url_option
@identity_option
def get_did(did_value, output_file, vdr_url, identity):
    """Fetches an anchored DID record."""
    body = _send("get", _did_url(vdr_url, did_value), identity, "fetch DID")
    if body is not None and output_file:
        with open(output_file, "w") as f:
            json.dump(body, f, indent=2)
        click.echo(click.style(f"DID record saved to {output_file}", fg="green"))


@did.command("list")
@vdr_url_option
@identity_option
def list_dids(vdr_url, identity):
    """Lists every anchored DID record."""
    body = _send("get", f"{vdr_url.rstrip('/')}/dids", identity, "list DIDs")
    if body is not None:
        click.echo(click.style(f"{len(body)} DID record(s) found.", fg="green"))
