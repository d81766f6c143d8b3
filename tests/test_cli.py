"""CLI tests — in-process ``main([...])`` and ``python -m slide_build``."""

from __future__ import annotations

import json
import os
import shlex
import subprocess
import sys
from pathlib import Path

import pytest

from slide_build.__main__ import main
from slide_build.contracts.load import validate_instance
from slide_build.core.config import DEFAULT_STRIP_PREFIX
from slide_build.utils.exit_codes import ExitCode

REPO_ROOT = Path(__file__).resolve().parents[1]
LINK = '<link rel="stylesheet" type="text/css" href="style.css">'


def _converter_arg(fake_converter) -> str:
    return shlex.join(fake_converter)


def _write_config(talk_dir: Path, fake_converter) -> None:
    conv = ", ".join(json.dumps(a) for a in fake_converter)
    (talk_dir / "slide_build.yaml").write_text(f"converter: [{conv}]\n", encoding="utf-8")


class TestBuildCommand:
    def test_no_arguments_builds_talk_html_in_cwd(
        self, talk_dir: Path, fake_converter, monkeypatch: pytest.MonkeyPatch
    ):
        _write_config(talk_dir, fake_converter)
        monkeypatch.chdir(talk_dir)
        assert main([]) == ExitCode.SUCCESS
        html = (talk_dir / "talk.html").read_text(encoding="utf-8")
        assert f"{LINK}</head>" in html
        assert DEFAULT_STRIP_PREFIX not in html
        assert not (talk_dir / "talk-tmp.html").exists()

    def test_explicit_source_and_output(self, talk_dir: Path, fake_converter):
        out = talk_dir / "deck" / "intro.html"
        rc = main([
            str(talk_dir / "talk.md"),
            "-o", str(out),
            "--intermediate", str(talk_dir / "raw.html"),
            "--converter", _converter_arg(fake_converter),
            "--stylesheet", "theme.css",
        ])
        assert rc == ExitCode.SUCCESS
        assert 'href="theme.css"></head>' in out.read_text(encoding="utf-8")

    def test_build_subcommand_json_report(
        self, talk_dir: Path, fake_converter, capsys: pytest.CaptureFixture[str]
    ):
        rc = main([
            "build",
            str(talk_dir / "talk.md"),
            "-o", str(talk_dir / "talk.html"),
            "--intermediate", str(talk_dir / "talk-tmp.html"),
            "--converter", _converter_arg(fake_converter),
            "--json",
        ])
        assert rc == ExitCode.SUCCESS
        report = json.loads(capsys.readouterr().out)
        validate_instance(report, "build_report.schema.json")
        assert report["postprocess"]["stylesheet_injections"] == 1

    def test_missing_source_is_error_and_writes_nothing(
        self, tmp_path: Path, fake_converter, capsys: pytest.CaptureFixture[str]
    ):
        rc = main([
            str(tmp_path / "absent.md"),
            "-o", str(tmp_path / "talk.html"),
            "--converter", _converter_arg(fake_converter),
        ])
        assert rc == ExitCode.ERROR
        assert "source file does not exist" in capsys.readouterr().err
        assert not (tmp_path / "talk.html").exists()

    def test_missing_converter_is_error(
        self, talk_dir: Path, capsys: pytest.CaptureFixture[str]
    ):
        rc = main([
            str(talk_dir / "talk.md"),
            "-o", str(talk_dir / "talk.html"),
            "--converter", "no-such-converter-xyz",
        ])
        assert rc == ExitCode.ERROR
        assert "converter not found" in capsys.readouterr().err

    def test_converter_failure_echoes_its_stderr(
        self,
        talk_dir: Path,
        fake_converter,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        monkeypatch.setenv("FAKE_CONVERTER_FAIL", "1")
        rc = main([
            str(talk_dir / "talk.md"),
            "-o", str(talk_dir / "talk.html"),
            "--intermediate", str(talk_dir / "talk-tmp.html"),
            "--converter", _converter_arg(fake_converter),
        ])
        assert rc == ExitCode.ERROR
        err = capsys.readouterr().err
        assert "status 3" in err
        assert "simulated failure" in err

    def test_bad_config_is_error(self, tmp_path: Path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("nope: 1\n", encoding="utf-8")
        assert main(["--config", str(cfg)]) == ExitCode.ERROR

    def test_non_path_config_value_is_error_not_traceback(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("source: 5\n", encoding="utf-8")
        assert main(["--config", str(cfg)]) == ExitCode.ERROR
        assert "source must be a path string" in capsys.readouterr().err

    def test_intermediate_aliasing_source_keeps_source(
        self, talk_dir: Path, fake_converter
    ):
        source = talk_dir / "talk.md"
        before = source.read_bytes()
        rc = main([
            str(source),
            "-o", str(talk_dir / "talk.html"),
            "--intermediate", str(source),
            "--converter", _converter_arg(fake_converter),
        ])
        assert rc == ExitCode.ERROR
        assert source.read_bytes() == before
        assert not (talk_dir / "talk.html").exists()


class TestCheckCommand:
    def test_clean_deck(self, tmp_path: Path):
        deck = tmp_path / "talk.html"
        deck.write_text(f"<head>{LINK}</head><body></body>", encoding="utf-8")
        assert main(["check", str(deck)]) == ExitCode.SUCCESS

    def test_violations_return_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        deck = tmp_path / "talk.html"
        deck.write_text(
            f'<head></head><script src="{DEFAULT_STRIP_PREFIX}r.js"></script>',
            encoding="utf-8",
        )
        assert main(["check", str(deck), "--json"]) == ExitCode.VIOLATION
        rules = [v["rule_id"] for v in json.loads(capsys.readouterr().out)]
        assert rules == ["DECK-CSS-001", "DECK-URL-001"]

    def test_missing_deck_is_error(self, tmp_path: Path):
        assert main(["check", str(tmp_path / "absent.html")]) == ExitCode.ERROR


# ── subprocess contract ─────────────────────────────────────────────


def _run(*args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
    env = {**os.environ}
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else ""
    )
    return subprocess.run(
        [sys.executable, "-m", "slide_build", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=str(cwd),
    )


class TestSubprocess:
    def test_build_then_check(self, talk_dir: Path, fake_converter):
        _write_config(talk_dir, fake_converter)
        r = _run(cwd=talk_dir)
        assert r.returncode == 0, r.stderr
        first = (talk_dir / "talk.html").read_bytes()

        r = _run(cwd=talk_dir)
        assert r.returncode == 0, r.stderr
        assert (talk_dir / "talk.html").read_bytes() == first

        r = _run("check", cwd=talk_dir)
        assert r.returncode == 0, r.stderr

    def test_missing_source_exit_nonzero(self, tmp_path: Path, fake_converter):
        _write_config(tmp_path, fake_converter)
        r = _run(cwd=tmp_path)
        assert r.returncode == 2
        assert not (tmp_path / "talk.html").exists()

    def test_version(self, tmp_path: Path):
        r = _run("--version", cwd=tmp_path)
        assert r.returncode == 0
        assert r.stdout.startswith("slide-build ")
