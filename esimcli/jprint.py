"""JSON status lines written by the command-line applets."""

from __future__ import annotations

import json
import sys
from typing import IO, Any


def error_message(function_name: str | None, detail: str | None = None) -> dict[str, Any]:
    """Build the message reporting that ``function_name`` failed."""
    return {
        "type": "lpa",
        "payload": {
            "code": -1,
            "message": function_name,
            "data": "" if detail is None else detail,
        },
    }


def progress_message(function_name: str | None) -> dict[str, Any]:
    """Build the message announcing that ``function_name`` is starting."""
    return {
        "type": "progress",
        "payload": {"code": 0, "message": function_name, "data": None},
    }


def success_message(data: Any = None) -> dict[str, Any]:
    """Build the message reporting success with optional ``data``."""
    return {
        "type": "lpa",
        "payload": {"code": 0, "message": "success", "data": data},
    }


def _emit(message: dict[str, Any], file: IO[str] | None) -> None:
    out = sys.stdout if file is None else file
    out.write(json.dumps(message, separators=(",", ":"), ensure_ascii=False) + "\n")
    out.flush()


def print_error(function_name: str | None, detail: str | None = None, file: IO[str] | None = None) -> None:
    """Write an error line."""
    _emit(error_message(function_name, detail), file)


def print_progress(function_name: str | None, file: IO[str] | None = None) -> None:
    """Write a progress line."""
    _emit(progress_message(function_name), file)


def print_success(data: Any = None, file: IO[str] | None = None) -> None:
    """Write a success line."""
    _emit(success_message(data), file)