from __future__ import annotations

import re
from typing import Any

_SECRET_KEY_RE = re.compile(r"(TOKEN|KEY|SECRET|PASSWORD|AUTHORIZATION)", re.IGNORECASE)
_SECRET_VALUE_RE = re.compile(r"(?i)(token|key|secret|password)(\s*[=:]\s*)([^\s,;]+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([^\s]+)")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return redacted


def redact_fields(fields: dict[str, Any]) -> dict[str, Any]:
    output: dict[str, Any] = {}
    for key, value in fields.items():
        if _SECRET_KEY_RE.search(str(key)):
            output[key] = "***"
        elif isinstance(value, str):
            output[key] = redact_string(value)
        else:
            output[key] = value
    return output
