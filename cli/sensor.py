from __future__ import annotations

import typer

from clients.errors import BridgeError
from clients.meraki import MerakiClient
from cli.render import render_prtg_result
from logging_config import configure_logging
from models.records import SensorModel
from services.readings import collect_channels


def run_sensor(model: SensorModel, auth_token: str, device_serial: str, organization_id: str) -> None:
    """Print PRTG XML for one device, or exit non-zero without any XML."""
    configure_logging()
    try:
        with MerakiClient(auth_token) as client:
            channels = collect_channels(client, device_serial, organization_id, model)
    except BridgeError as exc:
        typer.secho(f"{model.value} {device_serial}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(render_prtg_result(channels, model, device_serial))


def _build_app(model: SensorModel, help_text: str) -> typer.Typer:
    sensor_app = typer.Typer(
        help=help_text,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )

    @sensor_app.command()
    def main(
        auth_token: str = typer.Argument(..., metavar="AuthToken", help="Meraki Dashboard API key."),
        device_serial: str = typer.Argument(..., metavar="DeviceSerial", help="Serial of the MT device."),
        organization_id: str = typer.Argument(..., metavar="OrganizationID", help="Meraki organization id."),
    ) -> None:
        run_sensor(model, auth_token, device_serial, organization_id)

    return sensor_app


mt10_app = _build_app(SensorModel.MT10, "PRTG custom sensor for a Meraki MT10 (temperature and humidity).")
mt11_app = _build_app(SensorModel.MT11, "PRTG custom sensor for a Meraki MT11 (temperature).")
