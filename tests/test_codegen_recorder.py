"""Test the Playwright codegen wrapper without launching a browser."""

import subprocess

from recgen.recorder import codegen_recorder


def test_codegen_command(tmp_path):
    """Test the codegen command line."""
    output = tmp_path / "rec.java"

    assert codegen_recorder.codegen_command("https://example.com", output) == [
        "playwright", "codegen", "--target", "java", "--output", str(output), "https://example.com",
    ]


def test_record_with_codegen(tmp_path, monkeypatch):
    """Test that the recording file is returned once codegen has written it."""
    output = tmp_path / "recordings" / "rec.java"

    def fake_run(cmd, timeout):
        output.write_text('page.navigate("https://example.com");\n', encoding="utf-8")

    monkeypatch.setattr(codegen_recorder.subprocess, "run", fake_run)

    assert codegen_recorder.record_with_codegen("https://example.com", output) == output


def test_record_without_output(tmp_path, monkeypatch):
    """Test timeouts and a missing playwright executable."""
    def timed_out(cmd, timeout):
        raise subprocess.TimeoutExpired(cmd, timeout)

    def missing(cmd, timeout):
        raise FileNotFoundError("playwright")

    monkeypatch.setattr(codegen_recorder.subprocess, "run", timed_out)
    assert codegen_recorder.record_with_codegen("https://example.com", tmp_path / "a.java", timeout=1) is None

    monkeypatch.setattr(codegen_recorder.subprocess, "run", missing)
    assert codegen_recorder.main(["--url", "https://example.com", "--output", str(tmp_path / "b.java")]) == 1
