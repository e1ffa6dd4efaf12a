"""
Combinador de digests
=====================

Recolhe um ``ChunkDigest`` por janela (chegam por qualquer ordem) e, só
quando estão todos, dobra-os por ordem de índice num CRC-32 corrido sobre
os 4 bytes little-endian de cada valor.  A ordem de combinação faz parte
do formato de saída: mudá-la muda o digest.
"""

from __future__ import annotations

import threading
import zlib
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import IncompleteDigestError
from .hasher import ChunkDigest

EMPTY_DIGEST = 0   # valor inicial do CRC-32 → digest de um ficheiro vazio


@dataclass(frozen=True)
class FileDigest:
    value: int
    length: int
    chunks: int

    def hexdigest(self) -> str:
        return f"{self.value:08x}"

    def __str__(self) -> str:
        return self.hexdigest()


class DigestCombiner:
    def __init__(self, window_count: int) -> None:
        if window_count < 0:
            raise ValueError(f"window_count negativo: {window_count}")
        self.window_count = window_count
        self._slots: list[Optional[int]] = [None] * window_count
        self._filled = 0
        self._cond = threading.Condition()

    # ------------------------------------------------------------------ recolha
    def add(self, digest: ChunkDigest) -> None:
        if not 0 <= digest.index < self.window_count:
            raise ValueError(
                f"Índice {digest.index} fora do plano (0..{self.window_count - 1})"
            )
        with self._cond:
            if self._slots[digest.index] is not None:
                raise ValueError(f"Digest duplicado para o chunk {digest.index}")
            self._slots[digest.index] = digest.value
            self._filled += 1
            if self._filled == self.window_count:
                self._cond.notify_all()

    @property
    def filled(self) -> int:
        with self._cond:
            return self._filled

    @property
    def complete(self) -> bool:
        with self._cond:
            return self._filled == self.window_count

    def missing(self) -> list[int]:
        with self._cond:
            return [i for i, v in enumerate(self._slots) if v is None]

    def wait_complete(self, timeout: float | None = None) -> bool:
        """Bloqueia até haver um digest por janela.  False se expirou."""
        with self._cond:
            return self._cond.wait_for(lambda: self._filled == self.window_count, timeout)

    # ------------------------------------------------------------------ combinação
    def combine(self) -> int:
        with self._cond:
            if self._filled != self.window_count:
                raise IncompleteDigestError(
                    [i for i, v in enumerate(self._slots) if v is None]
                )
            values = list(self._slots)

        crc = EMPTY_DIGEST
        for value in values:
            crc = zlib.crc32(value.to_bytes(4, "little"), crc)
        return crc & 0xFFFFFFFF


def combine_digests(digests: Iterable[ChunkDigest], window_count: int) -> int:
    """Atalho: combina uma colecção já completa (qualquer ordem)."""
    combiner = DigestCombiner(window_count)
    for d in digests:
        combiner.add(d)
    return combiner.combine()


__all__ = ["DigestCombiner", "EMPTY_DIGEST", "FileDigest", "combine_digests"]
