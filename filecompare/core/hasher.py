from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import zlib

# ---- Configuração --------------------------------------------
_BUF_SIZE = 4 * 1024 * 1024   # 4 MiB por leitura: bom equilíbrio CPU/I/O
_CRC_MASK = 0xFFFFFFFF
# --------------------------------------------------------------


@dataclass(frozen=True)
class ChunkDigest:
    index: int
    value: int


def hash_chunk(buffer: bytes) -> int:
    """CRC-32 (sem sinal) de um chunk.  Sem estado: seguro entre threads."""
    return zlib.crc32(buffer) & _CRC_MASK


def digest_chunk(index: int, buffer: bytes) -> ChunkDigest:
    return ChunkDigest(index, hash_chunk(buffer))


def file_crc32(path: str | Path) -> int:
    """
    CRC-32 sequencial do ficheiro inteiro, lido em blocos.  Não é o digest
    por chunks do motor; serve de referência para verificações.
    """
    crc = 0
    with Path(path).open("rb") as f:
        while True:
            chunk = f.read(_BUF_SIZE)
            if not chunk:
                break
            crc = zlib.crc32(chunk, crc)
    return crc & _CRC_MASK


__all__ = ["ChunkDigest", "digest_chunk", "file_crc32", "hash_chunk"]
