# -*- coding: utf-8 -*-
"""Bootstrap da aplicação de linha de comandos.

Uso: ``python main.py <ficheiro1> <ficheiro2> [opções]``
"""
import sys


if __name__ == "__main__":
    # Import tardio: nada é carregado antes de o script correr
    from filecompare.cli import main

    sys.exit(main())
