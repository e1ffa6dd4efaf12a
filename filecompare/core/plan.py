"""
Plano de chunks
---------------

Divide um ficheiro de comprimento conhecido em janelas contíguas de
tamanho fixo.  Só a última janela pode ser mais curta.
"""

from __future__ import annotations
from dataclasses import dataclass

from .errors import InvalidPlanError

# ---- Configuração --------------------------------------------
DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024   # 4 MiB por janela
# --------------------------------------------------------------


@dataclass(frozen=True)
class ChunkWindow:
    index: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def _check(file_length: int, chunk_size: int) -> None:
    if isinstance(file_length, bool) or not isinstance(file_length, int):
        raise InvalidPlanError(f"Comprimento inválido: {file_length!r}")
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
        raise InvalidPlanError(f"Tamanho de chunk inválido: {chunk_size!r}")
    if file_length < 0:
        raise InvalidPlanError(f"Comprimento negativo: {file_length}")
    if chunk_size <= 0:
        raise InvalidPlanError(f"Tamanho de chunk tem de ser positivo: {chunk_size}")


def chunk_count(file_length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Número de janelas necessárias, incluindo a do resto."""
    _check(file_length, chunk_size)
    count, rest = divmod(file_length, chunk_size)
    if rest:
        count += 1
    return count


def plan_chunks(file_length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[ChunkWindow]:
    """
    Devolve as janelas ``(index, offset, length)`` que cobrem
    ``[0, file_length)`` por ordem.  Ficheiro vazio → lista vazia.
    """
    windows: list[ChunkWindow] = []
    for index in range(chunk_count(file_length, chunk_size)):
        offset = index * chunk_size
        windows.append(ChunkWindow(index, offset, min(chunk_size, file_length - offset)))
    return windows


__all__ = ["ChunkWindow", "DEFAULT_CHUNK_SIZE", "chunk_count", "plan_chunks"]
