"""Linha de comandos: ``filecompare FILE1 FILE2 [opções]``."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from filecompare import settings
from filecompare.core.config import EngineConfig
from filecompare.core.errors import CompareError, UsageError
from filecompare.core.runner import cli_run, report_lines

USAGE = "Usage: filecompare <file1> <file2>"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filecompare",
        description="Compara dois ficheiros por comprimento e digest CRC-32 por chunks.",
    )
    parser.add_argument("files", nargs="*", metavar="FILE")
    parser.add_argument("--chunk-size", type=int, default=None, metavar="BYTES",
                        help="tamanho de cada chunk (omissão: 4 MiB)")
    parser.add_argument("--max-resident", type=int, default=None, metavar="N",
                        help="máximo de chunks em memória (omissão: derivado da RAM)")
    parser.add_argument("--workers", type=int, default=None, metavar="N",
                        help="threads de hash (omissão: nº de CPUs)")
    parser.add_argument("--settings", default=None, metavar="JSON",
                        help="ficheiro de configuração alternativo")
    parser.add_argument("--log-dir", default=None, metavar="DIR",
                        help="grava um log JSON da comparação nesta pasta")
    parser.add_argument("--pdf", default=None, metavar="DIR",
                        help="gera um relatório PDF nesta pasta")
    parser.add_argument("--quiet", action="store_true",
                        help="só imprime comprimentos, digests e veredicto")
    return parser


def _check_files(files: Sequence[str], extra: Sequence[str] = ()) -> tuple[str, str]:
    # opções desconhecidas contam como uso errado, tal como o nº de ficheiros
    if extra or len(files) != 2:
        raise UsageError(USAGE)
    return files[0], files[1]


def main(argv: Sequence[str] | None = None) -> int:
    args, extra = build_arg_parser().parse_known_args(argv)

    try:
        path_a, path_b = _check_files(args.files, extra)
    except UsageError as exc:
        print(exc)
        return 0

    log = None if args.quiet else print
    try:
        if args.settings:
            settings.load(args.settings)
        config = EngineConfig.from_settings().with_overrides(
            chunk_size_bytes=args.chunk_size,
            max_resident_chunks=args.max_resident,
            max_workers=args.workers,
        )
        outcome = cli_run(
            path_a, path_b, config,
            callbacks={"log": log},
            log_dir=args.log_dir,
            pdf_dir=args.pdf,
        )
    except (CompareError, OSError) as exc:
        print(f"ERRO: {exc}", file=sys.stderr)
        return 1

    for line in report_lines(outcome.result):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
