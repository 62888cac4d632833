from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from clients.errors import TelemetryApiError
from models.records import Metric
from models.schemas import (
    DeviceDetailPayload,
    LatestReadingsEntry,
    NetworkDevicePayload,
    NetworkPayload,
    OrganizationPayload,
)
from settings import get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Cisco-Meraki-API-Key"


class MerakiClient:
    """Minimal read-only client for the Meraki Dashboard API."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.Client(
            base_url=(base_url or settings.meraki_base_url).rstrip("/"),
            timeout=timeout if timeout is not None else settings.meraki_timeout,
            headers={API_KEY_HEADER: api_key, "Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "MerakiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def list_organizations(self) -> List[OrganizationPayload]:
        payload = self._get_json("/organizations")
        return self._parse_list(payload, OrganizationPayload)

    def list_networks(self, organization_id: str) -> List[NetworkPayload]:
        payload = self._get_json(f"/organizations/{organization_id}/networks")
        return self._parse_list(payload, NetworkPayload)

    def list_network_devices(self, network_id: str) -> List[NetworkDevicePayload]:
        payload = self._get_json(f"/networks/{network_id}/devices")
        return self._parse_list(payload, NetworkDevicePayload)

    def get_device(self, serial: str) -> DeviceDetailPayload:
        payload = self._get_json(f"/devices/{serial}")
        try:
            return DeviceDetailPayload.model_validate(payload)
        except ValidationError as exc:
            raise TelemetryApiError(f"Unexpected device payload for {serial}: {exc}") from exc

    def get_latest_readings(
        self,
        organization_id: str,
        serials: Iterable[str],
        metrics: Iterable[Metric],
    ) -> List[LatestReadingsEntry]:
        params: List[Tuple[str, str]] = [("serials[]", serial) for serial in serials]
        params.extend(("metrics[]", metric.value) for metric in metrics)
        payload = self._get_json(
            f"/organizations/{organization_id}/sensor/readings/latest",
            params=params,
        )
        return self._parse_list(payload, LatestReadingsEntry)

    def _get_json(self, path: str, params: Optional[Sequence[Tuple[str, str]]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.debug("Meraki request failed", extra={"status_code": status_code})
            raise TelemetryApiError(
                f"GET {path} failed with status {status_code}: {self._detail(exc.response)}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TelemetryApiError(f"GET {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise TelemetryApiError(f"GET {path} returned a non-JSON body.") from exc

    @staticmethod
    def _parse_list(payload: Any, schema: type) -> list:
        if not isinstance(payload, list):
            raise TelemetryApiError(f"Expected a list of {schema.__name__}, got {type(payload).__name__}.")
        try:
            return [schema.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise TelemetryApiError(f"Unexpected {schema.__name__} payload: {exc}") from exc

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or "no detail provided."
        if isinstance(data, dict) and data.get("errors"):
            return "; ".join(str(error) for error in data["errors"])
        return str(data)
