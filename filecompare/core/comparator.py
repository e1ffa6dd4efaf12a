"""
Comparator
==========

Compara dois ficheiros:

• LengthCheck: só ``stat``; comprimentos diferentes → ``LENGTH_MISMATCH``
  sem abrir nenhum dos ficheiros.
• Comprimentos iguais → digest dos dois em paralelo (um coordenador por
  ficheiro, pool de hash partilhado) → ``EQUAL`` ou ``UNEQUAL``.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .callbacks import LogCb, ProgressCb, _emit
from .combiner import FileDigest
from .config import EngineConfig
from .engine import FileDigestEngine
from .errors import OperationCancelled, SourceUnavailableError


class Verdict(Enum):
    LENGTH_MISMATCH = "length_mismatch"
    EQUAL = "equal"
    UNEQUAL = "unequal"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    Verdict.LENGTH_MISMATCH: "Files are not the same length.",
    Verdict.EQUAL: "Files are the same.",
    Verdict.UNEQUAL: "Files are not the same.",
}


@dataclass
class ComparisonResult:
    path_a: Path
    path_b: Path
    length_a: int
    length_b: int
    verdict: Verdict
    digest_a: Optional[FileDigest] = None
    digest_b: Optional[FileDigest] = None
    durations: dict[str, float] = field(default_factory=dict)   # segundos por fase

    @property
    def same(self) -> bool:
        return self.verdict is Verdict.EQUAL

    @property
    def message(self) -> str:
        return self.verdict.message


def file_length(path: str | Path) -> int:
    """Comprimento em bytes sem ler o conteúdo."""
    p = Path(path)
    try:
        st = p.stat()
    except FileNotFoundError:
        raise FileNotFoundError(f"Ficheiro não encontrado: {p}") from None
    except OSError as exc:
        raise SourceUnavailableError(p, str(exc)) from exc
    if not p.is_file():
        raise SourceUnavailableError(p, "não é um ficheiro regular")
    return st.st_size


class Comparator:
    def __init__(
        self,
        engine: FileDigestEngine | None = None,
        config: EngineConfig | None = None,
        log_cb: LogCb | None = None,
    ) -> None:
        self._own_engine = engine is None
        # dois digests em paralelo partilham a fatia de memória
        self.engine = engine or FileDigestEngine(
            (config or EngineConfig()).resolved(files=2), log_cb=log_cb
        )
        self._log_cb = log_cb

    def close(self) -> None:
        if self._own_engine:
            self.engine.close()

    def __enter__(self) -> "Comparator":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------ fases
    def _timed_length(self, path: Path) -> tuple[int, float]:
        t0 = time.time()
        n = file_length(path)
        return n, time.time() - t0

    def _timed_digest(
        self, path: Path, progress_cb: ProgressCb | None, abort: threading.Event
    ) -> tuple[FileDigest, float]:
        t0 = time.time()
        try:
            d = self.engine.digest(path, progress_cb, stop_flag=abort.is_set)
        except BaseException:
            # o outro ficheiro deixa de valer a pena
            abort.set()
            raise
        return d, time.time() - t0

    # ------------------------------------------------------------------ API
    def compare(
        self,
        path_a: str | Path,
        path_b: str | Path,
        progress_a: ProgressCb | None = None,
        progress_b: ProgressCb | None = None,
    ) -> ComparisonResult:
        a = Path(path_a).absolute()
        b = Path(path_b).absolute()

        len_a, dur_a = self._timed_length(a)
        len_b, dur_b = self._timed_length(b)
        result = ComparisonResult(
            a, b, len_a, len_b, Verdict.LENGTH_MISMATCH,
            durations={"length_a": dur_a, "length_b": dur_b},
        )
        if len_a != len_b:
            _emit(self._log_cb, f"⚖️  Comprimentos diferentes ({len_a} ≠ {len_b}); sem digest.")
            return result

        # um coordenador por ficheiro; o hash corre no pool do motor
        abort = threading.Event()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="digest") as coord:
            fut_a = coord.submit(self._timed_digest, a, progress_a, abort)
            fut_b = coord.submit(self._timed_digest, b, progress_b, abort)
            wait([fut_a, fut_b])

        errors = [f.exception() for f in (fut_a, fut_b) if f.exception() is not None]
        if errors:
            # a causa real tem prioridade sobre o cancelamento do outro lado
            errors.sort(key=lambda e: isinstance(e, OperationCancelled))
            raise errors[0]

        digest_a, result.durations["digest_a"] = fut_a.result()
        digest_b, result.durations["digest_b"] = fut_b.result()

        result.digest_a = digest_a
        result.digest_b = digest_b
        same = digest_a.length == digest_b.length and digest_a.value == digest_b.value
        result.verdict = Verdict.EQUAL if same else Verdict.UNEQUAL
        return result


def compare_files(
    path_a: str | Path,
    path_b: str | Path,
    config: EngineConfig | None = None,
) -> ComparisonResult:
    with Comparator(config=config) as comparator:
        return comparator.compare(path_a, path_b)


__all__ = ["Comparator", "ComparisonResult", "Verdict", "compare_files", "file_length"]
