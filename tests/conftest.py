"""Shared fakes for ffprobe, ffmpeg and exiftool."""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from hevc_converter.domain import media
from hevc_converter.services import conversion_service, validation_service


def comparison_stderr(ssim: Optional[float], psnr: Optional[float] = 42.5) -> str:
    lines = ["Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':", "  Duration: 00:00:10.40"]
    if ssim is not None:
        lines.append(
            f"[Parsed_ssim_0 @ 0x5581c0] SSIM Y:{ssim:.6f} (14.2) U:{ssim:.6f} (14.2) "
            f"V:{ssim:.6f} (14.2) All:{ssim:.6f} (14.2)"
        )
    if psnr is not None:
        lines.append(
            f"[Parsed_psnr_1 @ 0x5581c1] PSNR y:40.10 u:44.00 v:44.20 "
            f"average:{psnr} min:35.11 max:50.02"
        )
    return "\n".join(lines) + "\n"


class FakeTools:
    """
    Stands in for every external tool.

    `media` maps a file name to its probe answers, e.g.
    {"clip.mp4": {"codec": "h264", "duration": 10.4}}. Encoding creates the
    partial output and registers it under the final name with `encoded`.
    """

    def __init__(self):
        self.media: Dict[str, dict] = {}
        self.commands: List[List[str]] = []
        self.probed: List[str] = []
        self.encoded = {"codec": "hevc", "duration": None}
        self.ssim = 0.98
        self.psnr = 42.5
        self.encode_returncode = 0
        self.exiftool_returncode = 0
        self.compare_returncode = 0

    def add(self, path: Path, codec: str = "h264", duration: float = 10.4, create: bool = True):
        if create:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"\x00" * 16)
        self.media[path.name] = {"codec": codec, "duration": duration}
        return path

    # --- ffprobe via ffmpeg-python ---
    def probe(self, filename, cmd="ffprobe", **kwargs):
        name = Path(filename).name
        self.probed.append(name)
        if name not in self.media:
            raise media.ffmpeg.Error("ffprobe", b"", f"{filename}: No such file or directory".encode())
        info = self.media[name]
        streams = [] if info["codec"] is None else [{"index": 0, "codec_type": "video", "codec_name": info["codec"]}]
        fmt = {} if info["duration"] is None else {"duration": f"{info['duration']:.6f}"}
        return {"streams": streams, "format": fmt}

    # --- ffmpeg / exiftool via run_cmd ---
    def run_cmd(self, cmd_parts, src_file_for_log=Path(), show_cmd=False, cmd_log_file_path=None):
        cmd = [str(part) for part in cmd_parts]
        self.commands.append(cmd)
        tool = Path(cmd[0]).name

        if tool == "exiftool":
            return subprocess.CompletedProcess(cmd, self.exiftool_returncode, "", "")

        if "-lavfi" in cmd:
            stderr = comparison_stderr(self.ssim, self.psnr)
            return subprocess.CompletedProcess(cmd, self.compare_returncode, "", stderr)

        partial = Path(cmd[-1])
        if self.encode_returncode == 0:
            partial.write_bytes(b"\x01" * 8)
            final_name = partial.name.removesuffix(".part")
            source_name = Path(cmd[cmd.index("-i") + 1]).name
            duration = self.encoded["duration"]
            if duration is None:
                duration = self.media[source_name]["duration"]
            self.media[final_name] = {"codec": self.encoded["codec"], "duration": duration}
        else:
            partial.write_bytes(b"\x01")
        return subprocess.CompletedProcess(cmd, self.encode_returncode, "", "encoder error")

    def encode_commands(self) -> List[List[str]]:
        return [c for c in self.commands if Path(c[0]).name == "ffmpeg" and "-lavfi" not in c]

    def compare_commands(self) -> List[List[str]]:
        return [c for c in self.commands if "-lavfi" in c]


@pytest.fixture
def tools(monkeypatch):
    fake = FakeTools()
    monkeypatch.setattr(media.ffmpeg, "probe", fake.probe)
    monkeypatch.setattr(validation_service, "run_cmd", fake.run_cmd)
    monkeypatch.setattr(conversion_service, "run_cmd", fake.run_cmd)
    return fake
