import pytest
from loguru import logger

from hevc_converter import main as main_module
from hevc_converter.main import EXIT_FAILURE, EXIT_OK, main
from hevc_converter.utils import dependency_checker


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


@pytest.fixture
def installed(monkeypatch):
    monkeypatch.setattr(dependency_checker.shutil, "which", lambda name: name)
    monkeypatch.setattr(dependency_checker.Modules, "log_versions", lambda self: None)


def run_main(tmp_path, *extra):
    return main(["--target-dir", str(tmp_path), "--config", str(tmp_path / "none.yaml"), "--no-color", *extra])


def test_success_exit_code(tools, installed, tmp_path):
    tools.add(tmp_path / "a.mp4")
    assert run_main(tmp_path) == EXIT_OK
    assert (tmp_path / "a.mkv").exists()


def test_missing_dependency_exits_before_touching_files(tools, monkeypatch, tmp_path):
    monkeypatch.setattr(dependency_checker.shutil, "which", lambda name: None if name == "exiftool" else name)
    tools.add(tmp_path / "a.mp4")

    assert run_main(tmp_path) == EXIT_FAILURE
    assert tools.probed == []
    assert tools.commands == []


def test_validation_failure_exit_code(tools, installed, tmp_path):
    tools.add(tmp_path / "a.mp4")
    tools.ssim = 0.94
    assert run_main(tmp_path) == EXIT_FAILURE


def test_continue_on_error_still_fails_the_run(tools, installed, tmp_path):
    tools.add(tmp_path / "a.mp4", codec="hevc")
    tools.add(tmp_path / "b.mp4")

    assert run_main(tmp_path, "--continue-on-error") == EXIT_FAILURE
    assert (tmp_path / "b.mkv").exists()


def test_defaults_to_current_directory(tools, installed, monkeypatch, tmp_path):
    tools.add(tmp_path / "a.mp4")
    monkeypatch.chdir(tmp_path)
    assert main(["--config", str(tmp_path / "none.yaml")]) == EXIT_OK
    assert (tmp_path / "a.mkv").exists()


def test_interrupt_exit_code(installed, monkeypatch, tmp_path):
    def interrupted(self):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module.BatchConversionPipeline, "run", interrupted)
    assert run_main(tmp_path) == main_module.EXIT_INTERRUPTED


def test_invalid_target_dir(tmp_path):
    with pytest.raises(SystemExit):
        main(["--target-dir", str(tmp_path / "missing")])
