"""Turn a Meraki latest-readings response into PRTG channel results."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Iterable, List, Optional, Protocol

from clients.errors import ReadingNotFoundError
from models.records import (
    ChannelResult,
    DeviceReading,
    Metric,
    SensorModel,
    channels_for,
    metrics_for,
)
from models.schemas import LatestReadingsEntry, ReadingPayload

logger = logging.getLogger(__name__)

MAX_JITTER_SECONDS = 0.5


class ReadingsSource(Protocol):
    def get_latest_readings(
        self, organization_id: str, serials: Iterable[str], metrics: Iterable[Metric]
    ) -> List[LatestReadingsEntry]:
        ...


def desynchronize(
    sleep: Optional[Callable[[float], None]] = None,
    uniform: Optional[Callable[[float, float], float]] = None,
) -> float:
    """Sleep up to half a second so parallel polls do not hit the API together."""
    delay = (uniform or random.uniform)(0.0, MAX_JITTER_SECONDS)
    (sleep or time.sleep)(delay)
    return delay


def _metric_value(reading: ReadingPayload, metric: Metric) -> Optional[float]:
    if metric is Metric.temperature:
        return reading.temperature.fahrenheit if reading.temperature else None
    return reading.humidity.relative_percentage if reading.humidity else None


def extract_readings(
    entries: Iterable[LatestReadingsEntry], serial: str, metrics: Iterable[Metric]
) -> List[DeviceReading]:
    entry = next((item for item in entries if item.serial == serial), None)
    if entry is None:
        raise ReadingNotFoundError(f"No readings returned for device {serial}.")

    readings: List[DeviceReading] = []
    for metric in metrics:
        value = next(
            (
                candidate
                for candidate in (_metric_value(reading, metric) for reading in entry.readings)
                if candidate is not None
            ),
            None,
        )
        if value is None:
            raise ReadingNotFoundError(f"Device {serial} has no {metric.value} reading.")
        readings.append(DeviceReading(serial=serial, metric=metric, value=value))
    return readings


def build_channels(model: SensorModel, readings: Iterable[DeviceReading]) -> List[ChannelResult]:
    by_metric = {reading.metric: reading.value for reading in readings}
    return [
        ChannelResult(
            channel=limits.channel,
            value=by_metric[limits.metric],
            unit=limits.unit,
            custom_unit=limits.custom_unit,
            max_error=limits.max_error,
            min_error=limits.min_error,
        )
        for limits in channels_for(model)
    ]


def collect_channels(
    client: ReadingsSource,
    serial: str,
    organization_id: str,
    model: SensorModel,
    sleep: Optional[Callable[[float], None]] = None,
) -> List[ChannelResult]:
    """Fetch the latest readings of one device and map them to channels.

    Exactly one request is made and nothing is retried.
    """
    metrics = metrics_for(model)
    desynchronize(sleep=sleep)
    entries = client.get_latest_readings(organization_id, [serial], metrics)
    readings = extract_readings(entries, serial, metrics)
    logger.info(
        "Collected %d reading(s)",
        len(readings),
        extra={"serial": serial, "model": model.value, "organization_id": organization_id},
    )
    return build_channels(model, readings)
