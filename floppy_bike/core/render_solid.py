"""
Solid Renderer
==============

Fast numpy-based renderer that draws the playfield as solid-colour shapes.
Pipes and the vehicle are drawn at their collision boxes.
"""

from __future__ import annotations

from typing import Any, Dict
import numpy as np


class SolidRenderer:
    """
    Renders the game state into an RGB array.

    Features:
    - Sky, ground strip, pipes with caps
    - Vehicle box with two wheels (no tilt; the box is the hitbox)

    Uses numpy for fast CPU-based rendering without pygame.
    """

    def __init__(self):
        self._sky_color = np.array([135, 206, 235], dtype=np.uint8)
        self._ground_color = np.array([85, 51, 17], dtype=np.uint8)
        self._pipe_color = np.array([46, 125, 50], dtype=np.uint8)
        self._cap_color = np.array([27, 94, 32], dtype=np.uint8)
        self._vehicle_color = np.array([255, 193, 7], dtype=np.uint8)
        self._wheel_color = np.array([0, 0, 0], dtype=np.uint8)

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = self._sky_color

        field_w = render_data["playfield_width"]
        field_h = render_data["playfield_height"]
        if field_w <= 0 or field_h <= 0:
            return img

        sx = width / field_w
        sy = height / field_h

        # Ground
        ground_y = render_data["ground_y"]
        self._fill_rect(img, 0, ground_y * sy, width, (field_h - ground_y) * sy, self._ground_color)

        # Pipes with caps
        for o in render_data["obstacles"]:
            x = o["x"] * sx
            w = o["width"] * sx
            top_h = o["gap_top"] * sy
            bottom_y = o["gap_bottom"] * sy
            self._fill_rect(img, x, 0, w, top_h, self._pipe_color)
            self._fill_rect(img, x, bottom_y, w, height - bottom_y, self._pipe_color)

            cap_over = 6 * sx
            cap_h = 16 * sy
            self._fill_rect(img, x - cap_over, top_h - cap_h, w + 2 * cap_over, cap_h, self._cap_color)
            self._fill_rect(img, x - cap_over, bottom_y, w + 2 * cap_over, cap_h, self._cap_color)

        # Vehicle
        v = render_data["vehicle"]
        vx = v["x"] * sx
        vy = v["y"] * sy
        vw = v["width"] * sx
        vh = v["height"] * sy
        self._fill_rect(img, vx, vy, vw, vh, self._vehicle_color)

        wheel_y = int(vy + vh - 6 * sy)
        wheel_r = max(1, int(8 * min(sx, sy)))
        self._draw_circle(img, int(vx + 14 * sx), wheel_y, wheel_r, self._wheel_color)
        self._draw_circle(img, int(vx + vw - 12 * sx), wheel_y, wheel_r, self._wheel_color)

        return img

    def _fill_rect(
        self,
        img: np.ndarray,
        x: float,
        y: float,
        w: float,
        h: float,
        color: np.ndarray
    ) -> None:
        """Fill an axis-aligned rectangle, clipped to the image."""
        height, width = img.shape[:2]
        x_min = max(0, int(round(x)))
        y_min = max(0, int(round(y)))
        x_max = min(width, int(round(x + w)))
        y_max = min(height, int(round(y + h)))

        if y_min >= y_max or x_min >= x_max:
            return

        img[y_min:y_max, x_min:x_max] = color

    def _draw_circle(
        self,
        img: np.ndarray,
        cx: int,
        cy: int,
        radius: int,
        color: np.ndarray
    ) -> None:
        """Draw a filled circle using numpy."""
        height, width = img.shape[:2]

        y_min = max(0, cy - radius)
        y_max = min(height, cy + radius + 1)
        x_min = max(0, cx - radius)
        x_max = min(width, cx + radius + 1)

        if y_min >= y_max or x_min >= x_max:
            return

        yy, xx = np.meshgrid(
            np.arange(y_min, y_max),
            np.arange(x_min, x_max),
            indexing='ij'
        )
        mask = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius ** 2
        img[y_min:y_max, x_min:x_max][mask] = color

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
