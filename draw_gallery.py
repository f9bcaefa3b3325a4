from __future__ import annotations

import argparse
import logging
import math
import os

from drawing import ShapeRenderer
from surfaces import MatplotlibSurface


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render a gallery of every shape and text style to an image.")
    p.add_argument("--width", type=int, default=800, help="surface width in pixels (default: 800)")
    p.add_argument("--height", type=int, default=600, help="surface height in pixels (default: 600)")
    p.add_argument("--dpi", type=int, default=100, help="figure dpi (default: 100)")
    p.add_argument("--background", type=str, default="white", help="background color")
    p.add_argument("--out", type=str, default="plots/gallery.png", help="output image path")
    p.add_argument("--verbose", action="store_true", help="log debug output")
    return p.parse_args()


def draw_gallery(renderer: ShapeRenderer) -> None:
    w, h = renderer.width, renderer.height
    col = w / 4
    row = h / 3

    renderer.clear()
    renderer.mark_center()

    # Row 1: outlines
    renderer.draw_line(col * 0.2, row * 0.2, col * 0.8, row * 0.8, "gray", 3)
    renderer.draw_triangle(col * 1.5, row * 0.5, row * 0.7, "blue", 3)
    renderer.draw_circle(col * 2.5, row * 0.5, row * 0.35, "black", 2, "yellow")
    renderer.draw_regular_polygon(col * 3.5, row * 0.5, row * 0.35, 6, "red", 2, "pink")

    # Row 2: stars and hearts
    renderer.draw_star(col * 0.5, row * 1.5, row * 0.4, row * 0.2, 5, "red", 2, "gold", -math.pi / 2)
    renderer.draw_star(col * 1.5, row * 1.5, row * 0.4, row * 0.25, 8, "blue", 2, "", math.pi / 4)
    renderer.draw_heart(col * 2.5, row * 1.35, row * 0.8, "red", 2, "pink")
    renderer.draw_heart(col * 3.5, row * 1.35, row * 0.6, "purple", 2, "", math.pi / 4)

    # Row 3: text styles
    renderer.draw_text("Hello World", col * 0.2, row * 2.3)
    renderer.draw_text(
        "Fancy Text",
        col * 2.0,
        row * 2.3,
        {
            "font": "bold 24px Arial",
            "color": "blue",
            "align": "center",
            "shadow": {"color": "rgba(0,0,0,0.5)", "blur": 5, "offsetX": 3, "offsetY": 3},
        },
    )
    renderer.draw_text(
        "Gradient Text",
        col * 0.2,
        row * 2.75,
        {
            "font": "32px Arial",
            "outline": {"color": "black", "width": 2},
            "gradient": {"colors": ["red", "yellow", "blue"], "direction": "vertical"},
        },
    )
    renderer.draw_text(
        "Horizontal",
        col * 2.2,
        row * 2.75,
        {"font": "28px Arial", "gradient": {"colors": ["green", "orange"]}},
    )


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    surface = MatplotlibSurface(args.width, args.height, dpi=args.dpi, background=args.background)
    renderer = ShapeRenderer(surface)
    draw_gallery(renderer)

    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    surface.write_png(args.out)
    print(f"Saved: {args.out}")


if __name__ == "__main__":
    main()
