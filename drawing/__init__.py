from .renderer import (
    ShapeRenderer,
    MissingSurfaceError,
)
