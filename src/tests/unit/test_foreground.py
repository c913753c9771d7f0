"""Unit tests for the picker and viewer wrappers and image downloads."""

import subprocess
from pathlib import Path

import pytest

from conftest import RecordingNotifier
from foretell.errors import NetworkError, PickerError, ViewerError
from foretell.foreground import picker as picker_module
from foretell.foreground import viewer as viewer_module
from foretell.foreground.images import download_images
from foretell.foreground.picker import pick_card, picker_args
from foretell.foreground.viewer import launch_viewer, viewer_command


class TestPicker:
    def test_default_args(self):
        assert picker_args() == ["dmenu", "-p", "scry", "-l", "30", "-i"]

    def test_names_are_piped_one_per_line(self, monkeypatch):
        seen = {}

        def fake_run(args, input=None, **kwargs):
            seen["input"] = input
            return subprocess.CompletedProcess(args, 0, stdout="Opt\n", stderr="")

        monkeypatch.setattr(picker_module.subprocess, "run", fake_run)

        assert pick_card(["Opt", "Shock"]) == "Opt"
        assert seen["input"] == "Opt\nShock\n"

    @pytest.mark.parametrize(
        "returncode,message",
        [(-9, "killed by signal: 9"), (1, "exited with status: 1")],
    )
    def test_failures(self, monkeypatch, returncode, message):
        monkeypatch.setattr(
            picker_module.subprocess,
            "run",
            lambda args, **kw: subprocess.CompletedProcess(args, returncode, stdout="", stderr=""),
        )

        with pytest.raises(PickerError, match=message):
            pick_card([])

    def test_missing_picker(self):
        with pytest.raises(PickerError):
            pick_card([], ["definitely-not-a-real-picker-binary"])


class FakeProcess:
    def __init__(self, status):
        self.status = status

    def wait(self):
        return self.status


class TestViewer:
    def test_sxiv_gets_geometry(self):
        args = viewer_command("nsxiv", [Path("/tmp/a.jpg")], "590x800")
        assert args == ["nsxiv", "-b", "-g", "590x800", "/tmp/a.jpg"]

    def test_other_viewers_get_files_only(self):
        assert viewer_command("xdg-open", [Path("/tmp/a.jpg")]) == ["xdg-open", "/tmp/a.jpg"]

    def test_missing_viewers_are_skipped(self, monkeypatch):
        tried = []

        def fake_popen(args):
            tried.append(args[0])
            if args[0] != "xdg-open":
                raise FileNotFoundError(args[0])
            return FakeProcess(0)

        monkeypatch.setattr(viewer_module.subprocess, "Popen", fake_popen)

        assert launch_viewer([Path("/tmp/a.jpg")]) is True
        assert tried == ["sxiv", "nsxiv", "xdg-open"]

    def test_no_viewer_installed(self, monkeypatch):
        def fake_popen(args):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(viewer_module.subprocess, "Popen", fake_popen)

        assert launch_viewer([Path("/tmp/a.jpg")]) is False

    def test_viewer_failure(self, monkeypatch):
        monkeypatch.setattr(viewer_module.subprocess, "Popen", lambda args: FakeProcess(2))

        with pytest.raises(ViewerError):
            launch_viewer([Path("/tmp/a.jpg")])


class PartialDownloads:
    def __init__(self, fail_on):
        self.fail_on = fail_on

    def download(self, url, sink):
        sink.write(b"jpeg"[: 2 if url == self.fail_on else 4])
        if url == self.fail_on:
            raise NetworkError(f"Download of {url} interrupted")
        return 4


class TestDownloadImages:
    def test_files_land_in_directory(self, tmp_path):
        files = download_images(PartialDownloads(None), ["a", "b"], RecordingNotifier(), tmp_path)

        assert [path.parent for path in files] == [tmp_path, tmp_path]
        assert [path.read_bytes() for path in files] == [b"jpeg", b"jpeg"]

    def test_failure_removes_partial_and_earlier_files(self, tmp_path):
        with pytest.raises(NetworkError):
            download_images(PartialDownloads("b"), ["a", "b", "c"], RecordingNotifier(), tmp_path)

        assert list(tmp_path.iterdir()) == []
