"""
EngineConfig
============

Parâmetros do motor de digest: tamanho de chunk, tecto de chunks em
memória e número de workers de hash.  Precedência: CLI > settings.json >
valores por omissão.
"""

from __future__ import annotations

import ctypes
import os
import platform
from dataclasses import dataclass, replace
from typing import Any, Optional

from .errors import ConfigError, InvalidPlanError
from .plan import DEFAULT_CHUNK_SIZE

# ---- Limites do tecto automático -----------------------------
_MEMORY_SHARE = 4          # usa no máximo 1/4 da memória disponível
_MIN_RESIDENT = 2
_MAX_RESIDENT = 1024
_FALLBACK_RESIDENT = 64    # quando não dá para medir a memória
# --------------------------------------------------------------


def _available_memory_windows() -> Optional[int]:
    class MEMORYSTATUSEX(ctypes.Structure):
        _fields_ = [
            ("dwLength", ctypes.c_ulong),
            ("dwMemoryLoad", ctypes.c_ulong),
            ("ullTotalPhys", ctypes.c_ulonglong),
            ("ullAvailPhys", ctypes.c_ulonglong),
            ("ullTotalPageFile", ctypes.c_ulonglong),
            ("ullAvailPageFile", ctypes.c_ulonglong),
            ("ullTotalVirtual", ctypes.c_ulonglong),
            ("ullAvailVirtual", ctypes.c_ulonglong),
            ("ullAvailExtendedVirtual", ctypes.c_ulonglong),
        ]

    stat = MEMORYSTATUSEX()
    stat.dwLength = ctypes.sizeof(MEMORYSTATUSEX)
    if not ctypes.windll.kernel32.GlobalMemoryStatusEx(ctypes.byref(stat)):
        return None
    return int(stat.ullAvailPhys)


def available_memory() -> Optional[int]:
    """Memória física disponível em bytes, ou None se não for mensurável."""
    if platform.system() == "Windows":
        try:
            return _available_memory_windows()
        except (AttributeError, OSError):
            return None
    try:
        pages = os.sysconf("SC_AVPHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return pages * page_size


def default_max_resident_chunks(
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    memory: Optional[int] = None,
    files: int = 1,
) -> int:
    """Tecto por ficheiro; com ``files`` digests em paralelo a fatia é dividida."""
    if memory is None:
        memory = available_memory()
    files = max(files, 1)
    if not memory:
        return max(_MIN_RESIDENT, _FALLBACK_RESIDENT // files)
    fits = (memory // (_MEMORY_SHARE * files)) // max(chunk_size, 1)
    return max(_MIN_RESIDENT, min(_MAX_RESIDENT, fits))


def default_max_workers() -> int:
    return os.cpu_count() or 1


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} tem de ser inteiro (recebido {value!r})")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} tem de ser inteiro (recebido {value!r})") from exc


@dataclass(frozen=True)
class EngineConfig:
    chunk_size_bytes: int = DEFAULT_CHUNK_SIZE
    max_resident_chunks: Optional[int] = None   # None → derivado da memória
    max_workers: Optional[int] = None           # None → os.cpu_count()

    # ------------------------------------------------------------------ derivados
    @property
    def resident_limit(self) -> int:
        if self.max_resident_chunks is not None:
            return self.max_resident_chunks
        return default_max_resident_chunks(self.chunk_size_bytes)

    @property
    def worker_count(self) -> int:
        if self.max_workers is not None:
            return self.max_workers
        return default_max_workers()

    # ------------------------------------------------------------------ validação
    def validate(self) -> "EngineConfig":
        if self.chunk_size_bytes <= 0:
            raise InvalidPlanError(
                f"chunk_size_bytes tem de ser positivo (recebido {self.chunk_size_bytes})"
            )
        if self.max_resident_chunks is not None and self.max_resident_chunks < 1:
            raise ConfigError(
                f"max_resident_chunks tem de ser >= 1 (recebido {self.max_resident_chunks})"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers tem de ser >= 1 (recebido {self.max_workers})")
        return self

    def resolved(self, files: int = 1) -> "EngineConfig":
        """
        Fixa os valores derivados (tecto de memória, workers) uma só vez,
        para que motor, log e relatório vejam os mesmos números.
        """
        self.validate()
        if self.max_resident_chunks is not None and self.max_workers is not None:
            return self
        return replace(
            self,
            max_resident_chunks=(
                self.max_resident_chunks
                if self.max_resident_chunks is not None
                else default_max_resident_chunks(self.chunk_size_bytes, files=files)
            ),
            max_workers=self.max_workers if self.max_workers is not None else default_max_workers(),
        )

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """Devolve cópia com os valores não-None de ``overrides``."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values).validate()

    @classmethod
    def from_settings(cls) -> "EngineConfig":
        from .. import settings

        chunk = settings.get("chunk_size_bytes")
        resident = settings.get("max_resident_chunks")
        workers = settings.get("max_workers")
        return cls(
            chunk_size_bytes=DEFAULT_CHUNK_SIZE if chunk is None else _as_int("chunk_size_bytes", chunk),
            max_resident_chunks=None if resident is None else _as_int("max_resident_chunks", resident),
            max_workers=None if workers is None else _as_int("max_workers", workers),
        ).validate()


__all__ = [
    "EngineConfig",
    "available_memory",
    "default_max_resident_chunks",
    "default_max_workers",
]
