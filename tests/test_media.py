import os
from pathlib import Path

import pytest

from hevc_converter.domain import media
from hevc_converter.domain.exceptions import (
    MediaProbeException,
    NoDurationFoundException,
    NoVideoStreamException,
)
from hevc_converter.domain.media import (
    ConversionPair,
    parse_duration,
    probe_codec,
    probe_duration,
    round_seconds,
)


def test_parse_duration():
    assert parse_duration("10.400000") == pytest.approx(10.4)
    assert parse_duration("01:00:00.500") == pytest.approx(3600.5)
    assert parse_duration("02:03.5") == pytest.approx(123.5)
    assert parse_duration("N/A") == 0.0


@pytest.mark.parametrize(
    "seconds, expected",
    [(10.4, 10), (10.49, 10), (10.5, 11), (10.6, 11), (11.5, 12), (0.4, 0)],
)
def test_round_seconds_rounds_half_away_from_zero(seconds, expected):
    assert round_seconds(seconds) == expected


def test_round_seconds_rejects_non_finite():
    with pytest.raises(NoDurationFoundException):
        round_seconds(float("nan"))


def test_conversion_pair_paths():
    pair = ConversionPair(Path("videos/holiday.clip.mp4"))
    assert pair.output == Path("videos/holiday.clip.mkv")
    assert pair.partial_output == Path("videos/holiday.clip.mkv.part")


def test_probe_codec_queries_first_video_stream(monkeypatch):
    calls = []

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        calls.append((filename, cmd, kwargs))
        return {"streams": [{"codec_type": "video", "codec_name": "h264"}], "format": {}}

    monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
    assert probe_codec(Path("clip.mp4"), "/opt/bin/ffprobe") == "h264"
    assert calls == [("clip.mp4", "/opt/bin/ffprobe", {"v": "error", "select_streams": "v:0"})]


def test_probe_runs_with_period_decimal_locale(monkeypatch):
    seen = []

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        seen.append(os.environ.get("LC_NUMERIC"))
        return {"streams": [], "format": {"duration": "10.400000"}}

    monkeypatch.setenv("LC_NUMERIC", "de_DE.UTF-8")
    monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)

    assert probe_duration(Path("clip.mp4")) == pytest.approx(10.4)
    assert seen == ["C"]
    assert os.environ["LC_NUMERIC"] == "de_DE.UTF-8"


def test_probe_codec_without_video_stream(monkeypatch):
    monkeypatch.setattr(media.ffmpeg, "probe", lambda filename, cmd="ffprobe", **kw: {"streams": []})
    with pytest.raises(NoVideoStreamException):
        probe_codec(Path("audio_only.mp4"))


def test_probe_failure_becomes_media_probe_exception(monkeypatch):
    def fake_probe(filename, cmd="ffprobe", **kwargs):
        raise media.ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")

    monkeypatch.setattr(media.ffmpeg, "probe", fake_probe)
    with pytest.raises(MediaProbeException, match="Invalid data found"):
        probe_codec(Path("broken.mp4"))
    with pytest.raises(MediaProbeException):
        probe_duration(Path("broken.mp4"))


def test_probe_duration_reads_container_duration(monkeypatch):
    monkeypatch.setattr(
        media.ffmpeg,
        "probe",
        lambda filename, cmd="ffprobe", **kw: {"streams": [], "format": {"duration": "12.345000"}},
    )
    assert probe_duration(Path("clip.mp4")) == pytest.approx(12.345)


@pytest.mark.parametrize("fmt", [{}, {"duration": "0.000000"}, {"duration": "N/A"}])
def test_probe_duration_missing_or_invalid(monkeypatch, fmt):
    monkeypatch.setattr(
        media.ffmpeg, "probe", lambda filename, cmd="ffprobe", **kw: {"streams": [], "format": fmt}
    )
    with pytest.raises(NoDurationFoundException):
        probe_duration(Path("clip.mp4"))
