"""User-level settings: which vault is active and the default work factor.

Environment variables
---------------------
  SEALKEY_VAULT        Use this vault, ignoring the stored pointer
  SEALKEY_CONFIG_DIR   Where the pointer file lives
  SEALKEY_COST         bcrypt cost for new vaults (default 12)
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .crypto import MAX_COST, MIN_COST
from .errors import BadPointer, PathEmpty
from .models import ActiveVault

logger = logging.getLogger("sealkey.config")

DEFAULT_COST = 12
_POINTER_FILE = "active.json"


def config_dir() -> Path:
    env = os.environ.get("SEALKEY_CONFIG_DIR")
    if env:
        return Path(env)
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home()))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "sealkey"


def _pointer_path() -> Path:
    return config_dir() / _POINTER_FILE


def get_active_vault() -> Optional[Path]:
    """Return the active vault path, or ``None`` if none has been chosen."""
    env = os.environ.get("SEALKEY_VAULT")
    if env:
        return Path(env)
    pointer = _pointer_path()
    if not pointer.exists():
        return None
    try:
        return ActiveVault.model_validate_json(pointer.read_text(encoding="utf-8")).path
    except ValidationError as exc:
        raise BadPointer(f"active vault pointer is corrupt: {pointer}") from exc


def set_active_vault(vault: Union[str, os.PathLike]) -> Path:
    """Remember *vault* as the active vault; returns its absolute path."""
    path = Path(vault).absolute()
    if not path.exists():
        raise PathEmpty(path)

    pointer = _pointer_path()
    pointer.parent.mkdir(parents=True, exist_ok=True)
    pointer.write_text(ActiveVault(path=path).model_dump_json(), encoding="utf-8")
    logger.debug("Active vault set to %s", path)
    return path


def default_cost() -> int:
    raw = os.environ.get("SEALKEY_COST")
    if not raw:
        return DEFAULT_COST
    cost = int(raw)
    if not MIN_COST <= cost <= MAX_COST:
        raise ValueError(f"SEALKEY_COST must be between {MIN_COST} and {MAX_COST}, got {cost}")
    return cost
