"""Discovery of Meraki MT devices and creation of matching PRTG sensors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple, TypeVar

from clients.errors import BridgeError
from models.records import CandidateDevice, Network, Organization, SensorModel
from models.schemas import (
    CreatedSensor,
    DeviceDetailPayload,
    NetworkDevicePayload,
    NetworkPayload,
    OrganizationPayload,
    SensorCreationRequest,
)
from services.retry import retry_with_backoff
from services.sensor_builder import build_sensor_request
from settings import Settings, get_settings

T = TypeVar("T")

logger = logging.getLogger(__name__)

ALL_NETWORKS = "all"

MODEL_CHOICES: dict[str, Tuple[SensorModel, ...]] = {
    "1": (SensorModel.MT10,),
    "2": (SensorModel.MT11,),
    "3": (SensorModel.MT10, SensorModel.MT11),
}


class SelectionError(BridgeError, ValueError):
    """A menu answer does not name one of the offered entries."""


class ModelChoiceError(BridgeError, ValueError):
    """The model filter answer is not one of the offered choices."""


class ProvisioningAborted(BridgeError):
    """A network could not be processed; carries the counts reached so far."""

    def __init__(self, message: str, summary: "ProvisionSummary") -> None:
        super().__init__(message)
        self.summary = summary


class TelemetrySource(Protocol):
    def list_organizations(self) -> List[OrganizationPayload]: ...

    def list_networks(self, organization_id: str) -> List[NetworkPayload]: ...

    def list_network_devices(self, network_id: str) -> List[NetworkDevicePayload]: ...

    def get_device(self, serial: str) -> DeviceDetailPayload: ...


class SensorTarget(Protocol):
    def sensor_ids(self, device_id: int) -> Set[int]: ...

    def submit_sensor(self, request: SensorCreationRequest) -> None: ...

    def find_new_sensor(self, request: SensorCreationRequest, existing: Set[int]) -> CreatedSensor: ...

    def resume(self, sensor_id: int) -> None: ...


def select_item(raw: str, items: Sequence[T]) -> T:
    """Return the entry whose zero-based index was typed, or raise ``SelectionError``."""
    candidate = raw.strip()
    try:
        index = int(candidate)
    except ValueError as exc:
        raise SelectionError(f"{candidate!r} is not a number.") from exc
    if not 0 <= index < len(items):
        raise SelectionError(f"{index} is out of range; choose 0 to {len(items) - 1}.")
    return items[index]


def select_networks(raw: str, networks: Sequence[Network]) -> List[Network]:
    if raw.strip().lower() == ALL_NETWORKS:
        if not networks:
            raise SelectionError("The organization has no networks.")
        return list(networks)
    return [select_item(raw, networks)]


def parse_model_filter(raw: str) -> Tuple[SensorModel, ...]:
    try:
        return MODEL_CHOICES[raw.strip()]
    except KeyError as exc:
        raise ModelChoiceError(f"Invalid model choice {raw.strip()!r}; expected 1, 2 or 3.") from exc


@dataclass
class ProvisionSummary:
    created: int = 0
    skipped: int = 0

    def merge(self, other: "ProvisionSummary") -> None:
        self.created += other.created
        self.skipped += other.skipped


Notifier = Callable[[str, str], None]


def _silent(_level: str, _message: str) -> None:
    return None


class Provisioner:
    """Runs discovery and sensor creation for one organization.

    Every outbound call goes through ``retry_with_backoff``. A failure while
    handling one device is reported and counted as skipped; failures listing
    organizations, networks or devices propagate.
    """

    def __init__(
        self,
        meraki: TelemetrySource,
        parent_device_id: int,
        settings: Optional[Settings] = None,
        sleep: Optional[Callable[[float], None]] = None,
        notify: Notifier = _silent,
    ) -> None:
        self.meraki = meraki
        self.parent_device_id = parent_device_id
        self.settings = settings or get_settings()
        self._sleep = sleep
        self._notify = notify

    def _call(self, operation: Callable[[], T]) -> T:
        return retry_with_backoff(
            operation,
            max_attempts=self.settings.retry_max_attempts,
            initial_delay=self.settings.retry_initial_delay,
            sleep=self._sleep,
        )

    def organizations(self) -> List[Organization]:
        payloads = self._call(self.meraki.list_organizations)
        return [Organization(id=item.id, name=item.name) for item in payloads]

    def networks(self, organization: Organization) -> List[Network]:
        payloads = self._call(lambda: self.meraki.list_networks(organization.id))
        return [Network(id=item.id, name=item.name) for item in payloads]

    def candidates(self, network: Network, models: Iterable[SensorModel]) -> List[CandidateDevice]:
        wanted = {model.value: model for model in models}
        payloads = self._call(lambda: self.meraki.list_network_devices(network.id))
        return [
            CandidateDevice(
                serial=item.serial,
                model=wanted[item.model],
                name=item.name or "",
                network_id=network.id,
            )
            for item in payloads
            if item.model in wanted
        ]

    def provision_device(
        self, prtg: SensorTarget, candidate: CandidateDevice, network: Network
    ) -> CreatedSensor:
        detail = self._call(lambda: self.meraki.get_device(candidate.serial))
        request = build_sensor_request(
            self.parent_device_id,
            candidate,
            network,
            self.settings,
            display_name=detail.name,
        )
        # Only the POST is retried; the lookup below never posts again.
        existing = self._call(lambda: prtg.sensor_ids(self.parent_device_id))
        self._call(lambda: prtg.submit_sensor(request))
        sensor = prtg.find_new_sensor(request, existing)
        if sensor.paused:
            try:
                prtg.resume(sensor.id)
            except Exception as exc:  # noqa: BLE001 - the sensor exists, left paused
                logger.warning("Could not resume sensor", extra={"sensor_id": sensor.id}, exc_info=True)
                self._notify(
                    "warning",
                    f"Sensor {sensor.name!r} was created paused and could not be resumed: {exc}",
                )
            else:
                logger.info("Resumed paused sensor", extra={"sensor_id": sensor.id})
        return sensor

    def provision_network(
        self, prtg: SensorTarget, network: Network, models: Iterable[SensorModel]
    ) -> ProvisionSummary:
        summary = ProvisionSummary()
        candidates = self.candidates(network, models)
        self._notify("info", f"Network {network.name}: {len(candidates)} matching device(s).")
        for candidate in candidates:
            context = {
                "serial": candidate.serial,
                "network_id": network.id,
                "model": candidate.model.value,
            }
            try:
                sensor = self.provision_device(prtg, candidate, network)
            except Exception as exc:  # noqa: BLE001 - counted as skipped
                summary.skipped += 1
                logger.exception("Skipping device", extra=context)
                self._notify("warning", f"Skipped {candidate.serial}: {exc}")
                continue
            summary.created += 1
            self._notify("success", f"Created sensor {sensor.name!r} ({candidate.serial}).")
        return summary

    def provision(
        self, prtg: SensorTarget, networks: Iterable[Network], models: Iterable[SensorModel]
    ) -> ProvisionSummary:
        models = tuple(models)
        summary = ProvisionSummary()
        for network in networks:
            try:
                summary.merge(self.provision_network(prtg, network, models))
            except BridgeError as exc:
                raise ProvisioningAborted(f"Network {network.name}: {exc}", summary) from exc
        return summary
