"""Tests for settings-driven trace output."""
from __future__ import annotations

import pytest

from debug_trace import close_log, trace, trace_call


@pytest.fixture()
def log_path(settings_manager, tmp_path):
    path = tmp_path / "trace.log"
    settings_manager.settings.debug.trace = True
    settings_manager.settings.debug.log_file = str(path)
    yield path
    close_log()


def read(path):
    close_log()
    return path.read_text(encoding="utf-8") if path.exists() else ""


def test_disabled_by_default(settings_manager, tmp_path, capsys):
    settings_manager.settings.debug.log_file = str(tmp_path / "trace.log")
    trace("hidden", "GESTURE")
    assert capsys.readouterr().err == ""
    assert not (tmp_path / "trace.log").exists()


def test_trace_writes_category(log_path, capsys):
    trace("pointer_down", "GESTURE")
    assert "[GESTURE] pointer_down" in capsys.readouterr().err
    assert "[GESTURE] pointer_down" in read(log_path)


def test_paint_needs_its_own_switch(log_path, settings_manager):
    trace("frame", "PAINT")
    assert "frame" not in read(log_path)
    settings_manager.settings.debug.trace_paint = True
    trace("frame", "PAINT")
    assert "frame" in read(log_path)


def test_trace_call(log_path):
    @trace_call("HISTORY")
    def step(n):
        return n + 1

    assert step(1) == 2
    text = read(log_path)
    assert "enter" in text and "step" in text
    assert "-> 2" in text


def test_trace_call_reraises(log_path):
    @trace_call("HISTORY")
    def boom():
        raise ValueError("bad entry")

    with pytest.raises(ValueError):
        boom()
    assert "[ERROR]" in read(log_path)
