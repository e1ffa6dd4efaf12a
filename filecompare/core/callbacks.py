from __future__ import annotations
from typing import Any, Callable, Optional

# --------------------------------------------------------------------------- #
#                               TIPO DE CALLBACKS                             #
# --------------------------------------------------------------------------- #
ProgressCb = Callable[[int, int], Any]   # chunks feitos, total
LogCb      = Callable[[str], Any]        # linha texto


def _emit(cb: Optional[LogCb], msg: str) -> None:
    try:
        if cb:
            cb(msg)
    except Exception:
        pass


def _progress(cb: Optional[ProgressCb], done: int, total: int) -> None:
    try:
        if cb:
            cb(done, total)
    except Exception:
        pass
