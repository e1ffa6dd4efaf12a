# settings.py
from __future__ import annotations
import json, sys
from pathlib import Path
from typing import Any, Dict

from filecompare.core.errors import ConfigError

_CFG = Path(__file__).with_name("settings.json")
_DATA: Dict[str, Any] = {}

def load(path: str | Path | None = None) -> None:
    """
    Lê o JSON de configuração.  O ``settings.json`` por omissão pode faltar
    ou estar estragado (→ defaults, com aviso); um ``path`` explícito que
    não exista ou não se leia é ``ConfigError``.
    """
    global _CFG, _DATA
    explicit = path is not None
    if explicit:
        _CFG = Path(path)
    _DATA = {}
    if not _CFG.exists():
        if explicit:
            raise ConfigError(f"Ficheiro de configuração não encontrado: {_CFG}")
        return
    try:
        data = json.loads(_CFG.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        if explicit:
            raise ConfigError(f"Configuração ilegível em {_CFG}: {exc}") from exc
        print(f"[settings] warning: {_CFG}: {exc}", file=sys.stderr)
        return
    if not isinstance(data, dict):
        if explicit:
            raise ConfigError(f"Configuração em {_CFG} tem de ser um objecto JSON")
        return
    _DATA = data

def get(key: str, default: Any = None) -> Any:
    return _DATA.get(key, default)

def set(key: str, value: Any) -> None:
    _DATA[key] = value

def save() -> None:
    try:
        _CFG.write_text(json.dumps(_DATA, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:   # nunca deixar falhar o fecho da app
        print(f"[settings] warning: {exc}", file=sys.stderr)

load()
