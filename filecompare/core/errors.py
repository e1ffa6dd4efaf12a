"""
Erros
=====

Hierarquia de excepções do comparador.  Tudo o que o núcleo lança (à
excepção de ``FileNotFoundError`` para caminhos inexistentes) deriva de
``CompareError``, para que a CLI possa apanhar e reportar sem veredicto.
"""

from __future__ import annotations
from pathlib import Path


class CompareError(Exception):
    """Base de todos os erros do comparador."""


class UsageError(CompareError):
    """Número errado de argumentos, ou opção desconhecida, na linha de comandos."""


class SourceUnavailableError(CompareError, OSError):
    """Não foi possível abrir, posicionar ou ler a origem."""

    def __init__(self, path: str | Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f" {path}" if path is not None else ""
        super().__init__(f"Origem indisponível{where}: {reason}")


class TruncatedReadError(CompareError):
    """A origem terminou antes de a janela ficar completa."""

    def __init__(
        self,
        path: str | Path | None,
        index: int,
        expected: int,
        actual: int,
    ) -> None:
        self.path = path
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Leitura truncada em {path} (chunk {index}): "
            f"esperados {expected} bytes, lidos {actual}"
        )


class InvalidPlanError(CompareError, ValueError):
    """Comprimento negativo ou tamanho de chunk não positivo."""


class ConfigError(CompareError, ValueError):
    """Valor de configuração inválido, ou ficheiro de configuração pedido ilegível."""


class IncompleteDigestError(CompareError):
    """Tentativa de combinar com digests de chunk em falta."""

    def __init__(self, missing: list[int]) -> None:
        self.missing = missing
        shown = ", ".join(str(i) for i in missing[:10])
        if len(missing) > 10:
            shown += ", …"
        super().__init__(f"Faltam digests para {len(missing)} chunk(s): {shown}")


class OperationCancelled(CompareError):
    """Operação interrompida pelo ``stop_flag``."""


__all__ = [
    "CompareError",
    "UsageError",
    "SourceUnavailableError",
    "TruncatedReadError",
    "InvalidPlanError",
    "ConfigError",
    "IncompleteDigestError",
    "OperationCancelled",
]
