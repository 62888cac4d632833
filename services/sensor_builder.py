"""Assemble PRTG sensor creation requests for Meraki MT devices."""

from __future__ import annotations

import re
from typing import Optional

from models.records import CandidateDevice, Network, SensorModel
from models.schemas import SensorCreationRequest
from settings import Settings

# PRTG substitutes these per parent device when the script runs.
ORGANIZATION_PLACEHOLDER = "%scriptplaceholder1"
API_KEY_PLACEHOLDER = "%scriptplaceholder2"

_TAG_SEPARATORS = re.compile(r"[\s,]+")


class SensorRequestBuilder:
    """Collects sensor parameters and freezes them into a request."""

    def __init__(self, device_id: int) -> None:
        self._fields: dict[str, object] = {"device_id": device_id}

    def name(self, value: str) -> "SensorRequestBuilder":
        self._fields["name"] = value
        return self

    def script(self, file_name: str, arguments: str) -> "SensorRequestBuilder":
        self._fields["script_file"] = file_name
        self._fields["script_args"] = arguments
        return self

    def mutex(self, key: str) -> "SensorRequestBuilder":
        self._fields["mutex_key"] = key
        return self

    def tags(self, value: str) -> "SensorRequestBuilder":
        self._fields["tags"] = value
        return self

    def priority(self, value: int) -> "SensorRequestBuilder":
        self._fields["priority"] = value
        return self

    def build(self) -> SensorCreationRequest:
        return SensorCreationRequest(**self._fields)


def script_for(model: SensorModel, settings: Settings) -> str:
    return settings.mt10_script if model is SensorModel.MT10 else settings.mt11_script


def script_arguments(serial: str) -> str:
    # Matches the adapter CLI order: AuthToken DeviceSerial OrganizationID.
    return f'"{API_KEY_PLACEHOLDER}" "{serial}" "{ORGANIZATION_PLACEHOLDER}"'


def sensor_tags(model: SensorModel, network: Network) -> str:
    network_tag = _TAG_SEPARATORS.sub("_", network.name.strip())
    parts = [f"meraki{model.value.lower()}"]
    if network_tag:
        parts.append(network_tag)
    return " ".join(parts)


def build_sensor_request(
    device_id: int,
    candidate: CandidateDevice,
    network: Network,
    settings: Settings,
    display_name: Optional[str] = None,
) -> SensorCreationRequest:
    name = (display_name or candidate.name or "").strip() or candidate.serial
    return (
        SensorRequestBuilder(device_id)
        .name(name)
        .script(script_for(candidate.model, settings), script_arguments(candidate.serial))
        .mutex(candidate.serial)
        .tags(sensor_tags(candidate.model, network))
        .priority(settings.sensor_priority)
        .build()
    )
