from __future__ import annotations

from pathlib import Path
from typing import Iterable

import typer
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from models.records import ChannelResult, SensorModel
from services.provisioner import ProvisionSummary

# Autoescaping stays off: the custom unit is already an XML character reference.
# The template escapes the free-text line explicitly.
_templates = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent / "templates")),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)

_STYLES = {
    "success": {"fg": typer.colors.GREEN},
    "warning": {"fg": typer.colors.YELLOW},
    "error": {"fg": typer.colors.RED, "err": True},
    "info": {},
}


def render_prtg_result(results: Iterable[ChannelResult], model: SensorModel, serial: str) -> str:
    template = _templates.get_template("prtg_result.xml.j2")
    return template.render(
        results=list(results),
        text=f"Model: {model.value}, Serial: {serial}",
    )


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_status(level: str, message: str) -> None:
    typer.secho(message, **_STYLES.get(level, {}))


def echo_menu(entries: Iterable[str]) -> None:
    for index, entry in enumerate(entries):
        typer.echo(f"  [{index}] {entry}")


def render_summary(summary: ProvisionSummary) -> None:
    typer.echo()
    echo_heading("Summary")
    echo_status("success", f"Sensors created: {summary.created}")
    level = "warning" if summary.skipped else "info"
    echo_status(level, f"Devices skipped: {summary.skipped}")
