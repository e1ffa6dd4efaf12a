# filecompare/pdf_report.py
from __future__ import annotations

from pathlib import Path
import datetime


from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from filecompare.core.comparator import ComparisonResult
from filecompare.core.config import EngineConfig


def _format_size(n: int) -> str:
    if n >= 1 << 40:
        return f"{n / (1 << 40):.2f} TB"
    if n >= 1 << 30:
        return f"{n / (1 << 30):.2f} GB"
    return f"{n / (1 << 20):.2f} MB"


def _format_duration(seconds: float) -> str:
    return f"{seconds * 1000:.0f} ms ({datetime.timedelta(seconds=seconds)})"


def gerar_relatorio_pdf(
    result: ComparisonResult,
    destino: str | Path,
    config: EngineConfig | None = None,
) -> Path:
    """Gera um relatório PDF com o resultado da comparação.

    O ficheiro é guardado com o nome ``comparacao_relatorio_<data>_<hora>.pdf``.


    Parameters
    ----------
    result: ComparisonResult
        Resultado devolvido pelo ``Comparator``.
    destino: str | Path
        Pasta onde o relatório será guardado.
    config: EngineConfig | None
        Configuração do motor, para registo.

    Returns
    -------
    Path
        Caminho para o ficheiro PDF criado.


    """
    destino = Path(destino)
    destino.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    pdf_path = destino / f"comparacao_relatorio_{timestamp}.pdf"

    c = canvas.Canvas(str(pdf_path), pagesize=A4)
    width, height = A4
    y = height - 50

    c.setFont("Helvetica-Bold", 16)
    c.drawString(50, y, "Relatório de Comparação")
    y -= 40

    c.setFont("Helvetica", 12)

    def _digest(d) -> str:
        return d.hexdigest() if d is not None else "-"

    dur = result.durations
    linhas = [
        f"Ficheiro A          : {result.path_a}",
        f"Comprimento A       : {result.length_a} bytes ({_format_size(result.length_a)})",
        f"Ficheiro B          : {result.path_b}",
        f"Comprimento B       : {result.length_b} bytes ({_format_size(result.length_b)})",
        f"Digest A (CRC-32)   : {_digest(result.digest_a)}",
        f"Digest B (CRC-32)   : {_digest(result.digest_b)}",
    ]
    for fase in ("length_a", "length_b", "digest_a", "digest_b"):
        if fase in dur:
            linhas.append(f"Tempo {fase:<14}: {_format_duration(dur[fase])}")
    if config is not None:
        linhas += [
            f"Tamanho de chunk    : {_format_size(config.chunk_size_bytes)}",
            f"Chunks em memória   : {config.resident_limit}",
            f"Workers de hash     : {config.worker_count}",
        ]

    for linha in linhas:
        c.drawString(50, y, linha)
        y -= 20
        if y < 80:
            c.showPage()
            y = height - 50
            c.setFont("Helvetica", 12)

    y -= 10
    c.setFont("Helvetica-Bold", 12)
    c.drawString(50, y, f"Veredicto: {result.message}")

    c.save()
    return pdf_path
