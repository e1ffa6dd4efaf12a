"""
Leitor com janela limitada
==========================

• ``ResidencyGate`` conta os chunks que estão em memória (lidos mas ainda
  não libertados pelo hasher) e bloqueia o leitor quando o tecto é atingido.
• ``read_windows()`` lê as janelas do plano estritamente por ordem, cada
  uma só depois de ter lugar no gate.

O slot é adquirido pelo leitor e libertado por quem consome o buffer
(normalmente o callback de conclusão da tarefa de hash).
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, Optional

from .errors import OperationCancelled, SourceUnavailableError, TruncatedReadError
from .plan import ChunkWindow

StopFlag = Callable[[], bool]

_POLL_SEC = 0.1   # de quanto em quanto tempo o gate volta a ver o stop_flag


class ResidencyGate:
    """Semáforo contador com estatísticas (``resident`` e ``peak``)."""

    def __init__(self, max_resident: int) -> None:
        if max_resident < 1:
            raise ValueError(f"max_resident tem de ser >= 1 (recebido {max_resident})")
        self.max_resident = max_resident
        self._resident = 0
        self._peak = 0
        self._cond = threading.Condition()

    # ------------------------------------------------------------------ estado
    @property
    def resident(self) -> int:
        with self._cond:
            return self._resident

    @property
    def peak(self) -> int:
        with self._cond:
            return self._peak

    # ------------------------------------------------------------------ API
    def acquire(self, stop_flag: Optional[StopFlag] = None) -> None:
        """Espera até haver lugar.  Lança ``OperationCancelled`` se pedido."""
        with self._cond:
            while self._resident >= self.max_resident:
                if stop_flag is not None and stop_flag():
                    raise OperationCancelled("Leitura interrompida à espera de memória")
                self._cond.wait(_POLL_SEC if stop_flag is not None else None)
            self._resident += 1
            self._peak = max(self._peak, self._resident)

    def release(self) -> None:
        with self._cond:
            if self._resident <= 0:
                raise RuntimeError("ResidencyGate libertado mais vezes do que adquirido")
            self._resident -= 1
            self._cond.notify()

    def wait_empty(self, timeout: float | None = None) -> bool:
        """Bloqueia até não haver chunks residentes."""
        with self._cond:
            return self._cond.wait_for(lambda: self._resident == 0, timeout)


def read_exact(
    fh: BinaryIO,
    window: ChunkWindow,
    path: str | Path | None = None,
) -> bytes:
    """
    Lê ``window.length`` bytes a partir de ``window.offset``.  Leituras
    curtas são acumuladas; se a origem acabar antes, ``TruncatedReadError``.
    """
    try:
        fh.seek(window.offset)
    except OSError as exc:
        raise SourceUnavailableError(path, f"seek para {window.offset} falhou: {exc}") from exc

    parts: list[bytes] = []
    got = 0
    while got < window.length:
        try:
            data = fh.read(window.length - got)
        except OSError as exc:
            raise SourceUnavailableError(
                path, f"leitura do chunk {window.index} falhou: {exc}"
            ) from exc
        if not data:
            raise TruncatedReadError(path, window.index, window.length, got)
        parts.append(data)
        got += len(data)

    if len(parts) == 1:
        return parts[0]
    return b"".join(parts)


def read_windows(
    fh: BinaryIO,
    windows: Iterable[ChunkWindow],
    gate: ResidencyGate,
    stop_flag: Optional[StopFlag] = None,
    path: str | Path | None = None,
) -> Iterator[tuple[ChunkWindow, bytes]]:
    """
    Gera ``(janela, buffer)`` pela ordem do plano.  Cada par entregue ocupa
    um slot do gate que o consumidor tem de libertar.  Não é retomável: um
    novo percurso exige nova chamada.
    """
    for window in windows:
        if stop_flag is not None and stop_flag():
            raise OperationCancelled(f"Leitura interrompida antes do chunk {window.index}")
        gate.acquire(stop_flag)
        try:
            buffer = read_exact(fh, window, path)
        except BaseException:
            # o buffer nunca chegou ao consumidor: o slot é nosso
            gate.release()
            raise
        yield window, buffer
        del buffer


__all__ = ["ResidencyGate", "StopFlag", "read_exact", "read_windows"]
