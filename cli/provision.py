from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

import typer

from clients.errors import BridgeError, MonitorApiError
from clients.meraki import MerakiClient
from clients.prtg import PrtgClient, prtg_session
from cli.render import echo_heading, echo_menu, echo_status, render_summary
from logging_config import configure_logging
from models.records import Network
from services.provisioner import (
    ALL_NETWORKS,
    Provisioner,
    ProvisioningAborted,
    SelectionError,
    parse_model_filter,
    select_item,
    select_networks,
)

T = TypeVar("T")

app = typer.Typer(
    help="Create PRTG sensors for the Meraki MT10/MT11 devices of an organization.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _fail(message: str) -> typer.Exit:
    echo_status("error", message)
    return typer.Exit(code=1)


def _prompt_until_valid(label: str, parse: Callable[[str], T]) -> T:
    while True:
        raw = typer.prompt(label)
        try:
            return parse(raw)
        except SelectionError as exc:
            echo_status("error", str(exc))


@app.command()
def main(
    prtg_server: str = typer.Option(..., "--prtg-server", help="PRTG core server address."),
    prtg_username: str = typer.Option(..., "--prtg-username", help="PRTG user name."),
    prtg_passhash: str = typer.Option(..., "--prtg-passhash", help="Passhash of the PRTG user."),
    prtg_device_id: int = typer.Option(..., "--prtg-device-id", help="PRTG device that will own the sensors."),
    meraki_api_key: Optional[str] = typer.Option(
        None,
        "--meraki-api-key",
        help="Meraki Dashboard API key (prompted for when omitted).",
    ),
) -> None:
    """Discover MT sensors in Meraki and create one PRTG sensor per device."""
    configure_logging()
    api_key = meraki_api_key or typer.prompt("Meraki API key", hide_input=True)

    with MerakiClient(api_key) as meraki:
        provisioner = Provisioner(meraki, parent_device_id=prtg_device_id, notify=echo_status)

        try:
            organizations = provisioner.organizations()
        except BridgeError as exc:
            raise _fail(f"Could not list Meraki organizations: {exc}") from exc
        if not organizations:
            raise _fail("No Meraki organizations are visible with this API key.")

        echo_heading("Organizations")
        echo_menu(f"{org.name} ({org.id})" for org in organizations)
        organization = _prompt_until_valid(
            "Organization number", lambda raw: select_item(raw, organizations)
        )
        echo_status("success", f"Using organization {organization.name}.")

        try:
            networks = provisioner.networks(organization)
        except BridgeError as exc:
            raise _fail(f"Could not list networks: {exc}") from exc
        if not networks:
            raise _fail(f"Organization {organization.name} has no networks.")

        echo_heading("Networks")
        echo_menu(f"{network.name} ({network.id})" for network in networks)
        selected = _prompt_until_valid(
            f"Network number or '{ALL_NETWORKS}'", lambda raw: select_networks(raw, networks)
        )

        try:
            with prtg_session(prtg_server, prtg_username, prtg_passhash, client_factory=PrtgClient) as prtg:
                device = prtg.get_device(prtg_device_id)
                echo_status("success", f"Connected to {prtg.server}; parent device {device.device!r}.")
                run_provisioning(provisioner, prtg, selected)
        except MonitorApiError as exc:
            raise _fail(
                f"PRTG request failed: {exc}. Check the server address, username, passhash and device id."
            ) from exc
        except BridgeError as exc:
            raise _fail(str(exc)) from exc


def run_provisioning(provisioner: Provisioner, prtg: PrtgClient, networks: List[Network]) -> None:
    echo_heading("Device models")
    typer.echo("  [1] MT10 only\n  [2] MT11 only\n  [3] MT10 and MT11")
    models = parse_model_filter(typer.prompt("Model choice"))
    try:
        summary = provisioner.provision(prtg, networks, models)
    except ProvisioningAborted as exc:
        render_summary(exc.summary)
        raise
    render_summary(summary)
