import sys

import pytest

from hevc_converter.domain.exceptions import MissingDependencyException
from hevc_converter.utils import dependency_checker
from hevc_converter.utils.dependency_checker import Modules


def test_all_dependencies_found(monkeypatch):
    monkeypatch.setattr(dependency_checker.shutil, "which", lambda name: f"/usr/bin/{name}")
    modules = Modules()
    modules.verify_dependencies()

    assert modules.resolve_executable("ffmpeg") == "/usr/bin/ffmpeg"
    assert modules.resolve_executable("ffprobe") == "/usr/bin/ffprobe"
    assert modules.resolve_executable("exiftool") == "/usr/bin/exiftool"


def test_first_missing_dependency_is_named(monkeypatch):
    looked_up = []

    def fake_which(name):
        looked_up.append(name)
        return None if name == "ffprobe" else f"/usr/bin/{name}"

    monkeypatch.setattr(dependency_checker.shutil, "which", fake_which)
    with pytest.raises(MissingDependencyException, match="ffprobe is not installed"):
        Modules().verify_dependencies()
    assert looked_up == ["ffmpeg", "ffprobe"]


def test_configured_tools_dir_takes_priority(monkeypatch, tmp_path):
    exe_suffix = ".exe" if sys.platform == "win32" else ""
    (tmp_path / f"ffmpeg{exe_suffix}").write_text("")
    monkeypatch.setattr(dependency_checker.shutil, "which", lambda name: f"/usr/bin/{name}")

    modules = Modules(tools_dir=tmp_path)
    modules.verify_dependencies(["ffmpeg", "exiftool"])

    assert modules.resolve_executable("ffmpeg") == str(tmp_path / f"ffmpeg{exe_suffix}")
    assert modules.resolve_executable("exiftool") == "/usr/bin/exiftool"


def test_unverified_tool_falls_back_to_name():
    assert Modules().resolve_executable("ffmpeg") == "ffmpeg"
