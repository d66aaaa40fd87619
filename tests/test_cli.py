"""Tests for the deskew command line."""

import re
from pathlib import Path

import cv2
import pytest
from click.testing import CliRunner

from houghdeskew import preview
from houghdeskew.cli import USAGE, main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def headless(monkeypatch):
    monkeypatch.setattr(preview, "has_display", lambda: False)


@pytest.mark.parametrize("args", [[], ["only.png"], ["a.png", "b.png", "c.png"]])
def test_usage_on_bad_pairs(runner, args):
    result = runner.invoke(main, args)
    assert result.exit_code == 0
    assert USAGE in result.output


def test_processes_pair(runner, page_file: Path, tmp_path: Path):
    dst = tmp_path / "out.png"
    result = runner.invoke(main, [str(page_file), str(dst)])
    assert result.exit_code == 0, result.output
    assert "lines in total" in result.stdout
    assert "lines ignored." in result.stdout
    match = re.search(r"Skew is (-?\d+\.\d+) degrees", result.stdout)
    assert match
    assert float(match.group(1)) == pytest.approx(3.0, abs=0.5)
    assert dst.exists()


def test_blank_page_reports_no_lines(runner, blank_page, tmp_path: Path):
    src = tmp_path / "blank.png"
    cv2.imwrite(str(src), blank_page)
    result = runner.invoke(main, [str(src), str(tmp_path / "out.png")])
    assert result.exit_code == 0
    assert "0 lines in total, 0 lines ignored." in result.stdout
    assert "Skew is 0.000 degrees (no lines detected)" in result.stdout


def test_preview_flag_is_removed_from_pairs(runner, page_file: Path, tmp_path: Path):
    dst = tmp_path / "out.png"
    result = runner.invoke(main, [str(page_file), "-preview", str(dst)])
    assert result.exit_code == 0, result.output
    assert dst.exists()


def test_missing_source_fails_but_continues(runner, page_file: Path, tmp_path: Path):
    result = runner.invoke(
        main,
        [str(tmp_path / "missing.png"), str(tmp_path / "a.png"), str(page_file), str(tmp_path / "b.png")],
    )
    assert result.exit_code == 1
    assert "missing.png" in result.output
    assert (tmp_path / "b.png").exists()


def test_fail_fast_stops(runner, page_file: Path, tmp_path: Path):
    result = runner.invoke(
        main,
        ["--fail-fast", str(tmp_path / "missing.png"), str(tmp_path / "a.png"), str(page_file), str(tmp_path / "b.png")],
    )
    assert result.exit_code == 1
    assert not (tmp_path / "b.png").exists()


def test_unwritable_destination(runner, page_file: Path, tmp_path: Path):
    result = runner.invoke(main, [str(page_file), str(tmp_path / "no" / "dir" / "out.png")])
    assert result.exit_code == 1


def test_bad_config_file(runner, page_file: Path, tmp_path: Path):
    config = tmp_path / "config.toml"
    config.write_text("[estimate]\ntrim_fraction = 2.0\n", encoding="utf-8")
    result = runner.invoke(main, ["--config", str(config), str(page_file), str(tmp_path / "out.png")])
    assert result.exit_code == 2


def test_config_file_is_applied(runner, page_file: Path, tmp_path: Path):
    config = tmp_path / "config.toml"
    config.write_text("[estimate]\nangle_window = 1.0\n", encoding="utf-8")
    result = runner.invoke(main, ["--config", str(config), str(page_file), str(tmp_path / "out.png")])
    assert result.exit_code == 0
    assert "Skew is 0.000 degrees" in result.stdout


def test_snapshot_dir_option(runner, page_file: Path, tmp_path: Path):
    debug = tmp_path / "debug"
    result = runner.invoke(main, ["--snapshot-dir", str(debug), str(page_file), str(tmp_path / "out.png")])
    assert result.exit_code == 0
    assert len(list(debug.iterdir())) == 3


def test_parallel_jobs(runner, page_file: Path, tmp_path: Path):
    args = ["--jobs", "2"]
    for i in range(2):
        args += [str(page_file), str(tmp_path / f"out{i}.png")]
    result = runner.invoke(main, args)
    assert result.exit_code == 0, result.output
    assert result.stdout.count("lines in total") == 2
