"""
CompareLog
==========

• Cria um ficheiro JSON (nome inclui timestamp UTC) dentro da pasta
  indicada.
• Guarda os dois caminhos, comprimentos, digests, veredicto, configuração
  do motor e tempos de cada fase, mais a lista de erros.
• `close()` actualiza campos finais, grava no disco e devolve o caminho.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from pathlib import Path
import json

from .comparator import ComparisonResult
from .config import EngineConfig


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompareLog:
    # -------------------------------------------------------------- construtor
    def __init__(self, dest: Path, path_a: Path, path_b: Path, config: EngineConfig) -> None:
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)

        stamp = _utcnow().strftime("%Y-%m-%dT%H-%M-%S")
        self.path = dest / f"compare_log_{stamp}.json"

        self.data: dict = {
            "timestamp": _utcnow().isoformat(timespec="seconds"),
            "file_a": str(path_a),
            "file_b": str(path_b),
            "chunk_size_bytes": config.chunk_size_bytes,
            "max_resident_chunks": config.resident_limit,
            "max_workers": config.worker_count,
            "length_a": None,
            "length_b": None,
            "digest_a": None,
            "digest_b": None,
            "verdict": None,
            "message": None,
            "durations": {},       # {"length_a": 0.001, "digest_a": 1.2, ...}
            "duration_sec": 0.0,
            "duration": "0:00:00",
            "errors": [],          # [{"error": "...", "type": "TruncatedReadError"}]
        }

    # -------------------------------------------------------------- helpers
    @staticmethod
    def _human_bytes(n: int) -> str:
        return f"{n / (1<<30):.1f} GB" if n >= 1 << 30 else f"{n / (1<<20):.1f} MB"

    # -------------------------------------------------------------- API p/ runner
    def set_result(self, result: ComparisonResult) -> None:
        self.data.update(
            length_a=result.length_a,
            length_b=result.length_b,
            size_a=self._human_bytes(result.length_a),
            size_b=self._human_bytes(result.length_b),
            digest_a=result.digest_a.hexdigest() if result.digest_a else None,
            digest_b=result.digest_b.hexdigest() if result.digest_b else None,
            verdict=result.verdict.value,
            message=result.message,
            durations={k: round(v, 4) for k, v in result.durations.items()},
        )

    def add_error(self, exc: BaseException) -> None:
        self.data["errors"].append({"error": str(exc), "type": type(exc).__name__})

    # -------------------------------------------------------------- fechar / gravar
    def close(self, duration_sec: float) -> Path:
        self.data.update(
            duration_sec=round(duration_sec, 2),
            duration=str(timedelta(seconds=int(duration_sec))),
        )

        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(self.data, fh, indent=2, ensure_ascii=False)

        return self.path
