from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from shapes.style import font_pixel_size
from .base import BaseSurface, PaintState, PathCommand


@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple[Any, ...]
    state: PaintState


@dataclass(frozen=True)
class PaintOp:
    """
    One stroke/fill/text paint with its device-space path and paint state.
    """
    kind: str  # "stroke" | "fill" | "fill_text" | "stroke_text" | "clear"
    path: Tuple[PathCommand, ...]
    state: PaintState
    text: Optional[str] = None
    position: Optional[Tuple[float, float]] = None


class RecordingSurface(BaseSurface):
    """
    Surface that draws nothing and remembers everything.

    `calls` lists every public call in order with the paint state at call
    time; `operations` keeps the painted paths in device space.
    """
    CHAR_WIDTH_EM = 0.5

    def __init__(self, width: float = 300, height: float = 150):
        self.calls: List[Call] = []
        self.operations: List[PaintOp] = []
        super().__init__(width, height)

    def _log_call(self, name: str, args: tuple = ()) -> None:
        self.calls.append(Call(name=name, args=tuple(args), state=self.state.copy()))

    # ---- queries ----
    def call_names(self, include_setters: bool = False) -> List[str]:
        return [c.name for c in self.calls if include_setters or not c.name.startswith("set_")]

    def calls_named(self, name: str) -> List[Call]:
        return [c for c in self.calls if c.name == name]

    def index_of(self, name: str) -> int:
        for i, c in enumerate(self.calls):
            if c.name == name:
                return i
        raise ValueError(f"no call named {name!r}")

    def ops(self, kind: str) -> List[PaintOp]:
        return [op for op in self.operations if op.kind == kind]

    def reset(self) -> None:
        self.calls.clear()
        self.operations.clear()

    # ---- backend hooks ----
    def _stroke_path(self, path: List[PathCommand], state: PaintState) -> None:
        self.operations.append(PaintOp("stroke", tuple(path), state))

    def _fill_path(self, path: List[PathCommand], state: PaintState) -> None:
        self.operations.append(PaintOp("fill", tuple(path), state))

    def _draw_text(self, text: str, x: float, y: float, state: PaintState, mode: str) -> None:
        self.operations.append(PaintOp(f"{mode}_text", (), state, text=text, position=(x, y)))

    def _measure_text(self, text: str, state: PaintState) -> float:
        return len(text) * font_pixel_size(state.font) * self.CHAR_WIDTH_EM

    def _clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        self.operations.append(PaintOp("clear", (), self.state.copy(), position=(x, y)))
