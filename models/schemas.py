"""Pydantic schemas for the Meraki and PRTG HTTP APIs."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OrganizationPayload(_Payload):
    """Entry of ``GET /organizations``."""

    id: str
    name: str = ""


class NetworkPayload(_Payload):
    """Entry of ``GET /organizations/{organizationId}/networks``."""

    id: str
    name: str = ""


class NetworkDevicePayload(_Payload):
    """Entry of ``GET /networks/{networkId}/devices``."""

    serial: str
    model: str = ""
    name: Optional[str] = None
    network_id: Optional[str] = Field(default=None, alias="networkId")


class DeviceDetailPayload(_Payload):
    """Body of ``GET /devices/{serial}``."""

    serial: str
    name: Optional[str] = None
    model: str = ""
    network_id: Optional[str] = Field(default=None, alias="networkId")


class TemperatureValue(_Payload):
    fahrenheit: Optional[float] = None
    celsius: Optional[float] = None


class HumidityValue(_Payload):
    relative_percentage: Optional[float] = Field(default=None, alias="relativePercentage")


class ReadingPayload(_Payload):
    ts: Optional[str] = None
    metric: Optional[str] = None
    temperature: Optional[TemperatureValue] = None
    humidity: Optional[HumidityValue] = None


class LatestReadingsEntry(_Payload):
    """Entry of ``GET /organizations/{organizationId}/sensor/readings/latest``."""

    serial: str
    readings: List[ReadingPayload] = Field(default_factory=list)


class PrtgDeviceRow(_Payload):
    objid: int
    device: str = ""
    host: str = ""


class PrtgSensorRow(_Payload):
    objid: int
    name: str = ""
    status: str = ""
    status_raw: Optional[int] = None


# PRTG status_raw codes for "Paused by User", "Paused by Dependency",
# "Paused by Schedule" and "Paused until".
PAUSED_STATUS_CODES = frozenset({7, 8, 9, 12})


class CreatedSensor(_Payload):
    id: int
    name: str
    status_raw: Optional[int] = None

    @property
    def paused(self) -> bool:
        return self.status_raw in PAUSED_STATUS_CODES


class SensorCreationRequest(BaseModel):
    """Immutable description of an EXE/Script Advanced sensor to create."""

    model_config = ConfigDict(frozen=True)

    device_id: int = Field(..., ge=0)
    name: str = Field(..., min_length=1)
    script_file: str = Field(..., min_length=1)
    script_args: str
    mutex_key: str
    tags: str
    priority: int = Field(default=3, ge=1, le=5)
    use_windows_auth: bool = False
    write_result: bool = False
    sensor_type: str = "exexml"

    def to_form(self) -> dict[str, str]:
        """Form fields understood by PRTG's ``addsensor5.htm`` endpoint."""
        return {
            "id": str(self.device_id),
            "sensortype": self.sensor_type,
            "name_": self.name,
            "tags_": self.tags,
            "priority_": str(self.priority),
            "exefile_": f"{self.script_file}|{self.script_file}||",
            "exefilelabel": "",
            "exeparams_": self.script_args,
            "environment_": "0",
            "usewindowsauthentication_": "1" if self.use_windows_auth else "0",
            "mutexname_": self.mutex_key,
            "timeout_": "60",
            "writeresult_": "1" if self.write_result else "0",
            "intervalgroup": "1",
            "interval_": "60|60 seconds",
            "errorintervalsdown_": "1",
            "inherittriggers": "1",
        }
