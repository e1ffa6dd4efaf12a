"""
FileDigestEngine
================

Calcula o digest de um ficheiro por chunks:

1. mede o comprimento e gera o plano de janelas;
2. lê as janelas por ordem, no máximo ``max_resident_chunks`` em memória;
3. entrega cada buffer a uma tarefa de CRC-32 no pool de workers;
4. espera por todas as tarefas e combina os CRC por ordem de índice.

Qualquer falha cancela as tarefas pendentes, espera pelas que já correm,
liberta os slots e fecha a origem.  Nunca devolve digests parciais.
"""

from __future__ import annotations

import io
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from functools import partial
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .callbacks import LogCb, ProgressCb, _emit, _progress
from .combiner import DigestCombiner, FileDigest
from .config import EngineConfig
from .errors import OperationCancelled, SourceUnavailableError
from .hasher import digest_chunk
from .plan import plan_chunks
from .reader import ResidencyGate, StopFlag, read_windows

Opener = Callable[[Path], BinaryIO]


def _open_source(path: Path) -> BinaryIO:
    return path.open("rb")


def _measure(fh: BinaryIO, path: str | Path | None) -> int:
    try:
        length = fh.seek(0, io.SEEK_END)
        fh.seek(0)
    except OSError as exc:
        raise SourceUnavailableError(path, f"não foi possível medir o comprimento: {exc}") from exc
    return length


def _hash_into(
    combiner: DigestCombiner,
    index: int,
    buffer: bytes,
    progress_cb: Optional[ProgressCb],
) -> None:
    combiner.add(digest_chunk(index, buffer))
    _progress(progress_cb, combiner.filled, combiner.window_count)


def _on_done(gate: ResidencyGate, failed: threading.Event, fut: Future) -> None:
    # corre também para tarefas canceladas: o slot é sempre devolvido
    gate.release()
    if not fut.cancelled() and fut.exception() is not None:
        failed.set()


def _first_error(futures: list[Future]) -> Optional[BaseException]:
    for fut in futures:
        if not fut.cancelled() and fut.exception() is not None:
            return fut.exception()
    return None


class FileDigestEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        pool: ThreadPoolExecutor | None = None,
        opener: Opener | None = None,
        log_cb: LogCb | None = None,
        stop_flag: StopFlag | None = None,
    ) -> None:
        self.config = (config or EngineConfig()).resolved()
        self._own_pool = pool is None
        self._pool = pool or ThreadPoolExecutor(
            max_workers=self.config.worker_count,
            thread_name_prefix="chunk-hash",
        )
        self._opener = opener or _open_source
        self._log_cb = log_cb
        self._stop_flag = stop_flag

    # ------------------------------------------------------------------ ciclo de vida
    def close(self) -> None:
        if self._own_pool:
            self._pool.shutdown(wait=True)

    def __enter__(self) -> "FileDigestEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------ API
    def digest(
        self,
        path: str | Path,
        progress_cb: ProgressCb | None = None,
        stop_flag: StopFlag | None = None,
    ) -> FileDigest:
        """Digest do ficheiro em ``path``.  A origem fecha-se sempre."""
        path = Path(path)
        _emit(self._log_cb, f"A calcular digest de {path}…")
        try:
            fh = self._opener(path)
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise SourceUnavailableError(path, str(exc)) from exc

        with fh:
            result = self.digest_source(fh, path, progress_cb, stop_flag)
        _emit(self._log_cb, f"✔ {path}: {result.hexdigest()} ({result.chunks} chunk(s))")
        return result

    def digest_source(
        self,
        fh: BinaryIO,
        path: str | Path | None = None,
        progress_cb: ProgressCb | None = None,
        stop_flag: StopFlag | None = None,
    ) -> FileDigest:
        """Digest de uma origem já aberta (não a fecha)."""
        length = _measure(fh, path)
        windows = plan_chunks(length, self.config.chunk_size_bytes)
        combiner = DigestCombiner(len(windows))
        gate = ResidencyGate(self.config.resident_limit)
        failed = threading.Event()
        futures: list[Future] = []

        def should_stop() -> bool:
            if failed.is_set():
                return True
            if stop_flag is not None and stop_flag():
                return True
            return self._stop_flag is not None and bool(self._stop_flag())

        try:
            for window, buffer in read_windows(fh, windows, gate, should_stop, path):
                fut = self._pool.submit(_hash_into, combiner, window.index, buffer, progress_cb)
                fut.add_done_callback(partial(_on_done, gate, failed))
                futures.append(fut)
                del buffer
            wait(futures)
            error = _first_error(futures)
            if error is not None:
                raise error
        except BaseException as exc:
            failed.set()
            for fut in futures:
                fut.cancel()
            wait(futures)
            if isinstance(exc, OperationCancelled):
                error = _first_error(futures)
                if error is not None:
                    raise error from None
            _emit(self._log_cb, f"❌ Digest abortado ({path}): {exc}")
            raise

        combiner.wait_complete()
        return FileDigest(combiner.combine(), length, len(windows))


def digest_file(path: str | Path, config: EngineConfig | None = None) -> FileDigest:
    """Atalho: digest de um único ficheiro com pool próprio."""
    with FileDigestEngine(config) as engine:
        return engine.digest(path)


__all__ = ["FileDigestEngine", "Opener", "digest_file"]
