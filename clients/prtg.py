from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

import httpx
from pydantic import ValidationError

from clients.errors import MonitorApiError
from models.schemas import CreatedSensor, PrtgDeviceRow, PrtgSensorRow, SensorCreationRequest
from settings import get_settings

logger = logging.getLogger(__name__)

LOOKUP_ATTEMPTS = 5
LOOKUP_DELAY = 1.0


def normalize_server(server: str) -> str:
    candidate = server.strip().rstrip("/")
    if not candidate:
        raise MonitorApiError("PRTG server address is empty.")
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    return candidate


class PrtgClient:
    """Session handle for the PRTG HTTP API authenticated with a passhash."""

    def __init__(
        self,
        server: str,
        username: str,
        passhash: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        lookup_attempts: int = LOOKUP_ATTEMPTS,
        lookup_delay: float = LOOKUP_DELAY,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        settings = get_settings()
        self.server = normalize_server(server)
        self._auth = {"username": username, "passhash": passhash}
        self._lookup_attempts = max(1, lookup_attempts)
        self._lookup_delay = lookup_delay
        self._sleep = sleep or time.sleep
        self._client = httpx.Client(
            base_url=self.server,
            timeout=timeout if timeout is not None else settings.prtg_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def connect(self) -> Dict[str, Any]:
        """Verify the credentials by fetching the server status."""
        payload = self._request("GET", "/api/getstatus.json", params={"id": "0"})
        data = self._json(payload, "/api/getstatus.json")
        if not isinstance(data, dict):
            raise MonitorApiError("Unexpected status payload from PRTG.")
        return data

    def get_device(self, device_id: int) -> PrtgDeviceRow:
        rows = self._table("devices", {"filter_objid": str(device_id)}, "objid,device,host")
        if not rows:
            raise MonitorApiError(f"PRTG device {device_id} was not found.")
        try:
            return PrtgDeviceRow.model_validate(rows[0])
        except ValidationError as exc:
            raise MonitorApiError(f"Unexpected device row from PRTG: {exc}") from exc

    def list_sensors(self, device_id: int) -> List[PrtgSensorRow]:
        rows = self._table("sensors", {"id": str(device_id)}, "objid,name,status")
        try:
            return [PrtgSensorRow.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise MonitorApiError(f"Unexpected sensor row from PRTG: {exc}") from exc

    def sensor_ids(self, device_id: int) -> Set[int]:
        return {row.objid for row in self.list_sensors(device_id)}

    def submit_sensor(self, request: SensorCreationRequest) -> None:
        """POST the request to ``addsensor5.htm``; this does not report the new id."""
        self._request("POST", "/addsensor5.htm", data=request.to_form())

    def find_new_sensor(self, request: SensorCreationRequest, existing: Set[int]) -> CreatedSensor:
        """Wait for a sensor id that was not in ``existing`` to appear on the device.

        PRTG can take a moment to list a new object, so the device is listed up
        to ``lookup_attempts`` times with a doubling wait. Nothing is posted here.
        """
        delay = self._lookup_delay
        for attempt in range(1, self._lookup_attempts + 1):
            created = [
                row for row in self.list_sensors(request.device_id) if row.objid not in existing
            ]
            if created:
                row = max(created, key=lambda item: item.objid)
                logger.info("Created PRTG sensor", extra={"sensor_id": row.objid})
                return CreatedSensor(
                    id=row.objid, name=row.name or request.name, status_raw=row.status_raw
                )
            if attempt < self._lookup_attempts:
                self._sleep(delay)
                delay *= 2
        raise MonitorApiError(
            f"PRTG accepted sensor {request.name!r} but no new sensor appeared on device "
            f"{request.device_id}."
        )

    def resume(self, sensor_id: int) -> None:
        self._request("GET", "/api/pause.htm", params={"id": str(sensor_id), "action": "1"})

    def _table(self, content: str, filters: Dict[str, str], columns: str) -> List[Any]:
        params = {"content": content, "columns": columns, "count": "*", **filters}
        response = self._request("GET", "/api/table.json", params=params)
        data = self._json(response, "/api/table.json")
        rows = data.get(content) if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise MonitorApiError(f"PRTG table response is missing {content!r}.")
        return rows

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        query = {**(params or {}), **self._auth}
        try:
            response = self._client.request(method, path, params=query, data=data)
        except httpx.HTTPError as exc:
            raise MonitorApiError(f"{method} {path} failed: {exc}") from exc
        # addsensor5.htm answers with a redirect to the new object's page.
        if response.is_error:
            raise MonitorApiError(
                f"{method} {path} failed with status {response.status_code}.",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MonitorApiError(f"{path} returned a non-JSON body.") from exc


@contextmanager
def prtg_session(
    server: str,
    username: str,
    passhash: str,
    client_factory: Any = PrtgClient,
) -> Iterator[PrtgClient]:
    """Connect to PRTG and always release the session afterwards.

    Failures while closing are logged and suppressed.
    """
    client = client_factory(server, username, passhash)
    try:
        client.connect()
        yield client
    finally:
        try:
            client.close()
        except Exception:  # noqa: BLE001 - best effort teardown
            logger.debug("Ignoring failure while closing the PRTG session", exc_info=True)
