from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional


class SettingsError(RuntimeError):
    """Raised when strict settings loading fails (dev/CI)."""


def truthy_env(name: str) -> bool:
    """Return True if environment variable is truthy (1/true/yes/on)."""
    v = os.environ.get(name, "")
    return v.strip().lower() in ("1", "true", "yes", "on")


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge dictionaries (override wins)."""
    out: dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _quarantine(path: Path) -> Path:
    """Rename a broken file to <name>.broken-YYYYmmdd-HHMMSS and return the new path."""
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    broken = path.with_suffix(f".broken-{ts}")
    path.rename(broken)
    return broken


def read_json_dict(
        path: Path,
        *,
        strict: bool,
        quarantine_broken: bool,
        warnings: list[str],
        logger: Any = None,
) -> Optional[dict[str, Any]]:
    """
    Read a JSON file whose top-level value must be an object.

    Behavior:
    - strict=True: missing/broken/non-dict -> raise SettingsError
    - strict=False: return None, append a message to `warnings` and log it
    - quarantine_broken=True: rename an unparsable file so the next start is clean
    """
    def fail(msg: str, exc: Exception | None = None) -> None:
        if strict:
            raise SettingsError(msg) from exc
        warnings.append(msg)
        if logger is not None:
            logger.warning(msg)
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        return fail(f"JSON file missing: {path}", e)
    except OSError as e:
        return fail(f"Failed to read JSON from {path}: ({e})", e)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse JSON from {path}: ({e})"
        if quarantine_broken:
            try:
                msg += f" -> quarantined to {_quarantine(path)}"
            except OSError as qe:
                msg += f" (quarantine failed: {qe})"
        return fail(msg, e)

    if not isinstance(data, dict):
        return fail(f"JSON must be an object at top-level: {path}")
    return data
