import json

import pytest

from filecompare import settings
from filecompare.cli import USAGE, main


@pytest.fixture(autouse=True)
def sem_settings(monkeypatch):
    monkeypatch.setattr(settings, "_CFG", settings._CFG)
    monkeypatch.setattr(settings, "_DATA", {})


@pytest.mark.parametrize(
    "argv", [[], ["so_um.bin"], ["a", "b", "c"], ["a", "b", "--bogus"]]
)
def test_usage_on_wrong_argument_count(argv, capsys):
    assert main(argv) == 0
    out = capsys.readouterr().out
    assert out.strip() == USAGE


def test_same_files(tmp_path, capsys):
    a = tmp_path / "a.bin"
    b = tmp_path / "b.bin"
    a.write_bytes(b"conteudo" * 1000)
    b.write_bytes(b"conteudo" * 1000)

    assert main([str(a), str(b), "--chunk-size", "1000", "--max-resident", "2", "--quiet"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 5
    assert "length: 8000" in lines[0]
    assert lines[2].split()[2].rstrip(".") == lines[3].split()[2].rstrip(".")
    assert lines[-1] == "Files are the same."


def test_different_files(tmp_path, capsys):
    a = tmp_path / "a.bin"
    b = tmp_path / "b.bin"
    a.write_bytes(b"aaaa")
    b.write_bytes(b"aaab")

    assert main([str(a), str(b), "--workers", "1"]) == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "Files are not the same."


def test_different_lengths(tmp_path, capsys):
    a = tmp_path / "a.bin"
    b = tmp_path / "b.bin"
    a.write_bytes(b"aaaa")
    b.write_bytes(b"aaa")

    assert main([str(a), str(b), "--quiet"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[-1] == "Files are not the same length."
    assert not any("hash" in l for l in lines)


def test_missing_file_no_verdict(tmp_path, capsys):
    a = tmp_path / "a.bin"
    a.write_bytes(b"a")

    assert main([str(a), str(tmp_path / "nao_existe.bin")]) == 1
    captured = capsys.readouterr()
    assert "ERRO:" in captured.err
    assert "Files are" not in captured.out


def test_invalid_chunk_size(tmp_path, capsys):
    a = tmp_path / "a.bin"
    a.write_bytes(b"a")
    assert main([str(a), str(a), "--chunk-size", "0"]) == 1
    assert "ERRO:" in capsys.readouterr().err


def test_settings_file_and_log_dir(tmp_path, capsys):
    cfg = tmp_path / "settings.json"
    cfg.write_text(json.dumps({"chunk_size_bytes": 2}))
    a = tmp_path / "a.bin"
    b = tmp_path / "b.bin"
    a.write_bytes(b"12345")
    b.write_bytes(b"12345")

    rc = main([str(a), str(b), "--settings", str(cfg), "--log-dir", str(tmp_path / "logs"), "--quiet"])
    assert rc == 0
    (log_path,) = (tmp_path / "logs").iterdir()
    data = json.loads(log_path.read_text(encoding="utf-8"))
    assert data["chunk_size_bytes"] == 2
    assert data["verdict"] == "equal"


@pytest.mark.parametrize("conteudo", [None, "{isto não é json", "[1, 2]"])
def test_explicit_settings_unusable_is_error(tmp_path, capsys, conteudo):
    cfg = tmp_path / "settings.json"
    if conteudo is not None:
        cfg.write_text(conteudo, encoding="utf-8")
    a = tmp_path / "a.bin"
    a.write_bytes(b"12345")

    assert main([str(a), str(a), "--settings", str(cfg), "--quiet"]) == 1
    captured = capsys.readouterr()
    assert "ERRO:" in captured.err
    assert str(cfg) in captured.err
    assert "Files are" not in captured.out
