import json
import sys
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, TextIO


def iso_timestamp() -> str:
    """UTC timestamp for structured CLI output."""
    return datetime.now(timezone.utc).isoformat()


def structured_response(
    command: str,
    *,
    status: str = "OK",
    message: str = "",
    payload: Optional[Dict] = None,
    summary: Optional[str] = None,
    exit_code: int = 0,
    stream: Optional[TextIO] = None,
) -> int:
    """Unified JSON response for non-interactive commands."""
    body: Dict[str, object] = {
        "command": command,
        "status": status,
        "message": message,
        "timestamp": iso_timestamp(),
        "payload": payload or {},
    }
    if summary:
        body["summary"] = summary
    print(json.dumps(body, ensure_ascii=False, indent=2), file=stream or sys.stdout)
    return exit_code


class Reporter:
    """Prints command outcomes either as text lines or as one JSON document."""

    def __init__(self, as_json: bool = False, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.as_json = as_json
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def ok(self, command: str, message: str, *, payload: Optional[Dict] = None, lines: Iterable[str] = ()) -> int:
        if self.as_json:
            return structured_response(command, message=message, payload=payload, stream=self.out)
        if message:
            print(message, file=self.out)
        for line in lines:
            print(line, file=self.out)
        return 0

    def error(self, command: str, message: str, *, payload: Optional[Dict] = None, lines: Iterable[str] = ()) -> int:
        if self.as_json:
            return structured_response(command, status="ERROR", message=message, payload=payload,
                                       exit_code=1, stream=self.out)
        print(f"Error: {message}", file=self.err)
        for line in lines:
            print(f"  - {line}", file=self.err)
        return 1


__all__ = ["iso_timestamp", "structured_response", "Reporter"]
