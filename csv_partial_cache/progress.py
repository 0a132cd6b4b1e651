from __future__ import annotations
from typing import Any, Callable, Dict, Optional

from rich.console import Console

from . import config

ProgressCallback = Callable[[Dict[str, Any]], None]

class Progress:
    """
    Forwards {"phase", "pct", "msg"} events to an on_progress callback.
    Repeated events of the same phase are dropped until pct advances by
    at least `step` or reaches 100.
    """
    def __init__(self, callback: Optional[ProgressCallback] = None, step: int = config.PROGRESS_STEP_PCT) -> None:
        if callback is None and config.VERBOSE:
            callback = console_printer()
        self._callback = callback
        self._step = max(1, int(step))
        self._last: Dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self._callback is not None

    def emit(self, phase: str, pct: int, msg: str = "") -> None:
        if self._callback is None:
            return
        pct = max(0, min(100, int(pct)))
        prev = self._last.get(phase)
        if prev is not None and pct < 100 and pct - prev < self._step:
            return
        self._last[phase] = pct
        self._callback({"phase": phase, "pct": pct, "msg": msg})

    def ratio(self, phase: str, done: int, total: int, msg: str = "") -> None:
        if self._callback is None:
            return
        pct = 100 if total <= 0 else (done * 100) // total
        self.emit(phase, pct, msg)

def console_printer(console: Optional[Console] = None) -> ProgressCallback:
    """Build an on_progress callback rendering events on a rich console."""
    con = console or Console(stderr=True, color_system="standard")

    def printer(evt: Dict[str, Any]) -> None:
        phase = evt.get("phase", "")
        pct = int(evt.get("pct", 0))
        msg = evt.get("msg", "")
        parts = [p for p in (phase, f"{pct}%", (f"- {msg}" if msg else "")) if p]
        text = "[progress] " + " ".join(parts)
        if con.is_terminal:
            con.print("\r\x1b[2K" + text, end="", markup=False, highlight=False, soft_wrap=False)
            if pct >= 100:
                con.print()
        elif pct in (0, 100):
            con.print(text, markup=False, highlight=False)

    return printer
