from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional


def _sep() -> str:
    return ';' if os.name == 'nt' else ':'


# Defaults
_DEFAULT_LOAD_DIRS = [Path('.')]
_DEFAULT_LOG_LEVEL = 'WARNING'
_TRUTHY = {'1', 'true', 'yes', 'on'}


def paths_from_env(var: str, defaults: Iterable[Path]) -> List[Path]:
    raw = os.environ.get(var)
    if not raw:
        return [Path(p) for p in defaults]
    sep = _sep()
    return [Path(p.strip()) for p in raw.split(sep) if p.strip()]


def get_load_path() -> List[Path]:
    """Directories searched by `load` and `read` for relative file names."""
    return paths_from_env('JLISP_PATH', _DEFAULT_LOAD_DIRS)


def resolve_source_path(name: str) -> Path:
    """Resolve a file name against the working directory, then the load path.

    Returns the first candidate that exists, or the name unchanged so the
    caller reports the original path when opening it fails.
    """
    path = Path(name)
    if path.is_absolute() or path.exists():
        return path
    for root in get_load_path():
        candidate = root / path
        if candidate.exists():
            return candidate
    return path


def get_log_level() -> int:
    raw = os.environ.get('JLISP_LOG_LEVEL', _DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.WARNING


def extended_library_enabled() -> bool:
    return os.environ.get('JLISP_EXTENDED', '').strip().lower() in _TRUTHY


def get_recursion_limit() -> Optional[int]:
    raw = os.environ.get('JLISP_RECURSION_LIMIT', '').strip()
    if not raw.isdigit():
        return None
    return int(raw)
