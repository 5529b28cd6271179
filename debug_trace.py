"""
debug_trace.py

Gesture-level trace instrumentation.
Enabled through the ``[debug]`` section of settings.toml.

Categories in use: GESTURE, HISTORY, STORE, PAINT, ERROR.
"""

import sys
import time
import traceback
from datetime import datetime
from functools import wraps

from settings import get_settings

_log_file = None
_log_path = None


def _enabled(category: str) -> bool:
    debug = get_settings().settings.debug
    if not debug.trace:
        return False
    if category == "PAINT" and not debug.trace_paint:
        return False
    return True


def _get_log_file():
    global _log_file, _log_path
    path = get_settings().settings.debug.log_file
    if not path:
        return None
    if _log_file is None or _log_path != path:
        close_log()
        try:
            _log_file = open(path, "a", encoding="utf-8")
            _log_path = path
        except OSError as e:
            print(f"[debug_trace] cannot open {path}: {e}", file=sys.stderr)
            return None
    return _log_file


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not _enabled(category):
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def trace_exception(msg: str = "Exception"):
    """Trace the exception currently being handled under ERROR."""
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator tracing entry, exit and duration of a call.

    Exceptions are traced under ERROR and re-raised.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not _enabled(category):
                return func(*args, **kwargs)
            name = func.__qualname__
            trace(f"enter {name}", category)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace(f"{name} raised {type(e).__name__}: {e}", "ERROR")
                raise
            elapsed_ms = (time.perf_counter() - start) * 1000
            trace(f"leave {name} -> {result!r} ({elapsed_ms:.1f} ms)", category)
            return result
        return wrapper
    return decorator


def close_log():
    """Close log file."""
    global _log_file, _log_path
    if _log_file:
        _log_file.close()
    _log_file = None
    _log_path = None
