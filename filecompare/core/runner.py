"""
runner.py  –  Função de alto-nível cli_run()
===========================================

• Coordena Comparator → CompareLog → relatório PDF
• Pode ser usado pela CLI ou por outra interface (através de callbacks).
• Devolve ``RunOutcome`` (resultado, caminho do log, caminho do PDF)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from .callbacks import LogCb, ProgressCb, _emit
from .comparator import Comparator, ComparisonResult
from .config import EngineConfig
from .logger import CompareLog


@dataclass
class RunOutcome:
    result: ComparisonResult
    log_path: Optional[Path] = None
    pdf_path: Optional[Path] = None


def _took(seconds: float) -> str:
    return f"Took {seconds * 1000:.0f}ms ({timedelta(seconds=seconds)})"


def report_lines(result: ComparisonResult) -> list[str]:
    """Linhas de consola: comprimentos, digests (se calculados) e veredicto."""
    dur = result.durations
    lines = [
        f"{result.path_a} length: {result.length_a}. {_took(dur.get('length_a', 0.0))}",
        f"{result.path_b} length: {result.length_b}. {_took(dur.get('length_b', 0.0))}",
    ]
    if result.digest_a is not None and result.digest_b is not None:
        lines += [
            f"File1 hash: {result.digest_a.hexdigest()}. {_took(dur.get('digest_a', 0.0))}",
            f"File2 hash: {result.digest_b.hexdigest()}. {_took(dur.get('digest_b', 0.0))}",
        ]
    lines.append(result.message)
    return lines


# --------------------------------------------------------------------------- #
#                                 FUNÇÃO PÚBLICA                              #
# --------------------------------------------------------------------------- #
def cli_run(
    path_a: str | Path,
    path_b: str | Path,
    config: EngineConfig | None = None,
    callbacks: dict[str, Callable] | None = None,
    log_dir: str | Path | None = None,
    pdf_dir: str | Path | None = None,
) -> RunOutcome:
    """
    Parameters
    ----------
    path_a, path_b : ficheiros a comparar
    config         : EngineConfig (None → settings.json / defaults)
    callbacks      : {"progress": ProgressCb, "log": LogCb}
    log_dir        : pasta para o log JSON (None → sem log)
    pdf_dir        : pasta para o relatório PDF (None → sem PDF)

    Erros são registados no log (se pedido) e relançados.
    """
    config = (config or EngineConfig.from_settings()).resolved(files=2)
    cb_progress: ProgressCb | None = None
    cb_log:      LogCb | None      = None
    if callbacks:
        cb_progress = callbacks.get("progress")
        cb_log      = callbacks.get("log")

    log = CompareLog(Path(log_dir), Path(path_a), Path(path_b), config) if log_dir else None

    t0 = time.time()
    try:
        with Comparator(config=config, log_cb=cb_log) as comparator:
            result = comparator.compare(path_a, path_b, cb_progress, cb_progress)
    except Exception as exc:
        _emit(cb_log, f"ERRO FATAL: {exc}")
        if log is not None:
            log.add_error(exc)
            log.close(time.time() - t0)
        raise

    outcome = RunOutcome(result)
    if log is not None:
        log.set_result(result)
        outcome.log_path = log.close(time.time() - t0)
        _emit(cb_log, f"Log gravado em {outcome.log_path}")
    if pdf_dir:
        from ..pdf_report import gerar_relatorio_pdf

        outcome.pdf_path = gerar_relatorio_pdf(result, pdf_dir, config)
        _emit(cb_log, f"Relatório PDF gravado em {outcome.pdf_path}")
    return outcome


__all__ = ["RunOutcome", "cli_run", "report_lines"]
