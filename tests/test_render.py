from __future__ import annotations

from models.records import ChannelResult, SensorModel
from cli.render import render_prtg_result

MT10_XML = """<prtg>
  <result>
    <channel>Temperature</channel>
    <value>71.6</value>
    <unit>Custom</unit>
    <customunit>&#176;F</customunit>
    <float>1</float>
    <limitmode>1</limitmode>
    <limitmaxerror>95</limitmaxerror>
    <limitminerror>55</limitminerror>
  </result>
  <result>
    <channel>Humidity</channel>
    <value>45.2</value>
    <unit>Percent</unit>
    <float>1</float>
    <limitmode>1</limitmode>
    <limitmaxerror>80</limitmaxerror>
  </result>
  <text>Model: MT10, Serial: Q2XX-AAAA-0001</text>
</prtg>"""

MT11_XML = """<prtg>
  <result>
    <channel>Temperature</channel>
    <value>38.3</value>
    <unit>Custom</unit>
    <customunit>&#176;F</customunit>
    <float>1</float>
    <limitmode>1</limitmode>
    <limitmaxerror>46</limitmaxerror>
    <limitminerror>36</limitminerror>
  </result>
  <text>Model: MT11, Serial: Q2XX-BBBB-0002</text>
</prtg>"""


def _temperature(value: float, low: int, high: int) -> ChannelResult:
    return ChannelResult(
        channel="Temperature",
        value=value,
        unit="Custom",
        custom_unit="&#176;F",
        max_error=high,
        min_error=low,
    )


def test_render_mt10_matches_prtg_layout() -> None:
    channels = [
        _temperature(71.6, 55, 95),
        ChannelResult(channel="Humidity", value=45.2, unit="Percent", max_error=80),
    ]

    assert render_prtg_result(channels, SensorModel.MT10, "Q2XX-AAAA-0001") == MT10_XML


def test_render_mt11_has_single_result() -> None:
    output = render_prtg_result([_temperature(38.3, 36, 46)], SensorModel.MT11, "Q2XX-BBBB-0002")

    assert output == MT11_XML
    assert output.count("<result>") == 1


def test_render_escapes_serial_in_text() -> None:
    output = render_prtg_result([_temperature(38.3, 36, 46)], SensorModel.MT11, "A&B<1>")

    assert "<text>Model: MT11, Serial: A&amp;B&lt;1&gt;</text>" in output
    assert "<customunit>&#176;F</customunit>" in output
