from .base import (
    Surface,
    BaseSurface,
    PaintState,
    LinearGradient,
    TextMetrics,
)
from .recording import RecordingSurface, Call, PaintOp
from .mpl import MatplotlibSurface, to_rgba
