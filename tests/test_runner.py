import json

import pytest

from filecompare.core import config as config_mod
from filecompare.core import engine as engine_mod
from filecompare.core.config import EngineConfig
from filecompare.core.runner import cli_run, report_lines


def _par(tmp_path, a: bytes, b: bytes):
    fa = tmp_path / "a.bin"
    fb = tmp_path / "b.bin"
    fa.write_bytes(a)
    fb.write_bytes(b)
    return fa, fb


def test_cli_run_writes_json_log(tmp_path):
    fa, fb = _par(tmp_path, b"abc" * 100, b"abc" * 100)
    linhas = []

    outcome = cli_run(
        fa, fb, EngineConfig(chunk_size_bytes=64),
        callbacks={"log": linhas.append},
        log_dir=tmp_path / "logs",
    )

    assert outcome.result.same
    assert outcome.log_path.parent == tmp_path / "logs"
    assert outcome.log_path.name.startswith("compare_log_")
    data = json.loads(outcome.log_path.read_text(encoding="utf-8"))
    assert data["verdict"] == "equal"
    assert data["message"] == "Files are the same."
    assert data["digest_a"] == data["digest_b"] == outcome.result.digest_a.hexdigest()
    assert data["chunk_size_bytes"] == 64
    assert data["errors"] == []
    assert any("Log gravado" in l for l in linhas)


def test_cli_run_logs_error_and_reraises(tmp_path):
    fa = tmp_path / "a.bin"
    fa.write_bytes(b"abc")
    with pytest.raises(FileNotFoundError):
        cli_run(fa, tmp_path / "nao_existe.bin", EngineConfig(), log_dir=tmp_path / "logs")

    (log_path,) = (tmp_path / "logs").iterdir()
    data = json.loads(log_path.read_text(encoding="utf-8"))
    assert data["verdict"] is None
    assert data["errors"][0]["type"] == "FileNotFoundError"


def test_cli_run_pdf_report(tmp_path):
    fa, fb = _par(tmp_path, b"x" * 10, b"y" * 10)
    outcome = cli_run(fa, fb, EngineConfig(chunk_size_bytes=4), pdf_dir=tmp_path / "pdf")

    assert outcome.result.message == "Files are not the same."
    assert outcome.pdf_path.name.startswith("comparacao_relatorio_")
    assert outcome.pdf_path.read_bytes().startswith(b"%PDF")


def test_report_lines_length_mismatch(tmp_path):
    fa, fb = _par(tmp_path, b"x", b"xy")
    outcome = cli_run(fa, fb, EngineConfig())
    lines = report_lines(outcome.result)

    assert len(lines) == 3
    assert lines[0].startswith(f"{fa.absolute()} length: 1.")
    assert lines[1].startswith(f"{fb.absolute()} length: 2.")
    assert lines[-1] == "Files are not the same length."


def test_report_lines_with_digests(tmp_path):
    fa, fb = _par(tmp_path, b"abc", b"abc")
    lines = report_lines(cli_run(fa, fb, EngineConfig()).result)

    assert len(lines) == 5
    assert lines[2].startswith("File1 hash: ")
    assert lines[3].startswith("File2 hash: ")
    assert lines[-1] == "Files are the same."


def test_cli_run_log_and_engine_share_resident_cap(tmp_path, monkeypatch):
    fa, fb = _par(tmp_path, b"xyz" * 500, b"xyz" * 500)
    # cada leitura da memória devolve um valor diferente
    memorias = iter(range(64 * 1024, 1 << 30, 64 * 1024))
    monkeypatch.setattr(config_mod, "available_memory", lambda: next(memorias))

    tectos = []

    class GateRegistado(engine_mod.ResidencyGate):
        def __init__(self, max_resident):
            tectos.append(max_resident)
            super().__init__(max_resident)

    monkeypatch.setattr(engine_mod, "ResidencyGate", GateRegistado)

    outcome = cli_run(fa, fb, EngineConfig(chunk_size_bytes=64), log_dir=tmp_path / "logs")

    data = json.loads(outcome.log_path.read_text(encoding="utf-8"))
    assert len(tectos) == 2
    assert tectos[0] == tectos[1] == data["max_resident_chunks"]
    # 64 KiB / (4 * 2 ficheiros) em chunks de 64 bytes
    assert data["max_resident_chunks"] == 128
