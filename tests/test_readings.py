"""Unit tests for turning latest readings into PRTG channels."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from clients.errors import ReadingNotFoundError
from models.records import Metric, SensorModel
from models.schemas import LatestReadingsEntry
from services.readings import (
    MAX_JITTER_SECONDS,
    collect_channels,
    desynchronize,
    extract_readings,
)

SERIAL = "Q2XX-AAAA-0001"


def _entries(payload: List[Dict[str, Any]]) -> List[LatestReadingsEntry]:
    return [LatestReadingsEntry.model_validate(item) for item in payload]


def _payload(serial: str = SERIAL) -> List[Dict[str, Any]]:
    return [
        {
            "serial": "Q2XX-OTHER-0002",
            "readings": [{"metric": "temperature", "temperature": {"fahrenheit": 10.0}}],
        },
        {
            "serial": serial,
            "network": {"id": "N_1", "name": "HQ"},
            "readings": [
                {"ts": "2024-01-01T00:00:00Z", "metric": "humidity", "humidity": {"relativePercentage": 45.2}},
                {"metric": "temperature", "temperature": {"fahrenheit": None, "celsius": None}},
                {"metric": "temperature", "temperature": {"fahrenheit": 71.6, "celsius": 22.0}},
                {"metric": "temperature", "temperature": {"fahrenheit": 99.9, "celsius": 37.7}},
            ],
        },
    ]


class StubReadingsClient:
    def __init__(self, payload: List[Dict[str, Any]]) -> None:
        self.payload = payload
        self.calls: List[tuple] = []

    def get_latest_readings(self, organization_id, serials, metrics):
        self.calls.append((organization_id, list(serials), list(metrics)))
        return _entries(self.payload)


def test_extract_uses_first_non_null_reading_per_metric() -> None:
    readings = extract_readings(_entries(_payload()), SERIAL, [Metric.temperature, Metric.humidity])

    assert [(reading.metric, reading.value) for reading in readings] == [
        (Metric.temperature, 71.6),
        (Metric.humidity, 45.2),
    ]
    assert all(reading.serial == SERIAL for reading in readings)


def test_extract_fails_when_serial_missing() -> None:
    with pytest.raises(ReadingNotFoundError):
        extract_readings(_entries(_payload(serial="Q2XX-ZZZZ-9999")), SERIAL, [Metric.temperature])


def test_extract_fails_when_metric_missing() -> None:
    payload = [{"serial": SERIAL, "readings": [{"metric": "temperature", "temperature": {"fahrenheit": 70.0}}]}]

    with pytest.raises(ReadingNotFoundError, match="humidity"):
        extract_readings(_entries(payload), SERIAL, [Metric.temperature, Metric.humidity])


def test_collect_channels_mt10_uses_static_limits() -> None:
    client = StubReadingsClient(_payload())
    waits: List[float] = []

    channels = collect_channels(client, SERIAL, "org-1", SensorModel.MT10, sleep=waits.append)

    assert client.calls == [("org-1", [SERIAL], [Metric.temperature, Metric.humidity])]
    assert len(waits) == 1 and 0.0 <= waits[0] <= MAX_JITTER_SECONDS
    temperature, humidity = channels
    assert (temperature.channel, temperature.value) == ("Temperature", 71.6)
    assert (temperature.min_error, temperature.max_error) == (55, 95)
    assert temperature.custom_unit == "&#176;F"
    assert (humidity.channel, humidity.value, humidity.unit) == ("Humidity", 45.2, "Percent")
    assert (humidity.min_error, humidity.max_error) == (None, 80)


def test_collect_channels_mt11_requests_temperature_only() -> None:
    client = StubReadingsClient(_payload())

    channels = collect_channels(client, SERIAL, "org-1", SensorModel.MT11, sleep=lambda _delay: None)

    assert client.calls[0][2] == [Metric.temperature]
    assert len(channels) == 1
    assert (channels[0].value, channels[0].min_error, channels[0].max_error) == (71.6, 36, 46)


def test_thresholds_do_not_depend_on_reading() -> None:
    payload = [{"serial": SERIAL, "readings": [{"temperature": {"fahrenheit": 120.0}}]}]

    channels = collect_channels(
        StubReadingsClient(payload), SERIAL, "org-1", SensorModel.MT11, sleep=lambda _delay: None
    )

    assert (channels[0].min_error, channels[0].max_error) == (36, 46)


def test_desynchronize_sleeps_for_drawn_delay() -> None:
    waits: List[float] = []
    bounds: List[tuple] = []

    def fake_uniform(low: float, high: float) -> float:
        bounds.append((low, high))
        return 0.25

    delay = desynchronize(sleep=waits.append, uniform=fake_uniform)

    assert delay == 0.25
    assert waits == [0.25]
    assert bounds == [(0.0, 0.5)]
