"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class SensorModel(str, Enum):
    """Meraki environmental sensor models the bridge knows how to poll."""

    MT10 = "MT10"
    MT11 = "MT11"


class Metric(str, Enum):
    temperature = "temperature"
    humidity = "humidity"


@dataclass(slots=True)
class DeviceReading:
    """The latest value of one metric for one device.

    Temperature is always Fahrenheit, humidity a relative percentage.
    """

    serial: str
    metric: Metric
    value: float


@dataclass(frozen=True, slots=True)
class ChannelLimits:
    """Static PRTG channel settings for one metric of one model."""

    metric: Metric
    channel: str
    unit: str
    max_error: int
    min_error: Optional[int] = None
    custom_unit: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ChannelResult:
    """One ``<result>`` block of PRTG custom sensor output."""

    channel: str
    value: float
    unit: str
    max_error: int
    min_error: Optional[int] = None
    custom_unit: Optional[str] = None
    is_float: bool = True
    limit_mode: bool = True


@dataclass(slots=True)
class Organization:
    id: str
    name: str


@dataclass(slots=True)
class Network:
    id: str
    name: str


@dataclass(slots=True)
class CandidateDevice:
    serial: str
    model: SensorModel
    name: str
    network_id: str


_TEMPERATURE_UNIT = "&#176;F"

MODEL_CHANNELS: dict[SensorModel, Tuple[ChannelLimits, ...]] = {
    SensorModel.MT10: (
        ChannelLimits(
            metric=Metric.temperature,
            channel="Temperature",
            unit="Custom",
            custom_unit=_TEMPERATURE_UNIT,
            max_error=95,
            min_error=55,
        ),
        ChannelLimits(
            metric=Metric.humidity,
            channel="Humidity",
            unit="Percent",
            max_error=80,
        ),
    ),
    SensorModel.MT11: (
        ChannelLimits(
            metric=Metric.temperature,
            channel="Temperature",
            unit="Custom",
            custom_unit=_TEMPERATURE_UNIT,
            max_error=46,
            min_error=36,
        ),
    ),
}


def channels_for(model: SensorModel) -> Tuple[ChannelLimits, ...]:
    return MODEL_CHANNELS[model]


def metrics_for(model: SensorModel) -> list[Metric]:
    return [limits.metric for limits in MODEL_CHANNELS[model]]
