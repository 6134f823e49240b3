from __future__ import annotations

from dataclasses import dataclass

import pyglet


ENABLED_FILL = (60, 60, 64)
ENABLED_BORDER = (110, 110, 115)
DISABLED_FILL = (40, 40, 44)
DISABLED_BORDER = (80, 80, 85)


def point_in_rect(x: float, y: float, rect: tuple[float, float, float, float]) -> bool:
    rx, ry, rw, rh = rect
    return rx <= x <= (rx + rw) and ry <= y <= (ry + rh)


@dataclass
class MenuButton:
    """A clickable sidebar row; hidden buttons ignore clicks."""

    shape: pyglet.shapes.BorderedRectangle
    label: pyglet.text.Label
    bounds: tuple[float, float, float, float]
    enabled: bool = True
    visible: bool = True

    def contains(self, x: float, y: float) -> bool:
        return self.visible and point_in_rect(x, y, self.bounds)

    def set_state(self, *, text: str | None = None, enabled: bool | None = None, visible: bool | None = None) -> None:
        if text is not None:
            self.label.text = text
        if enabled is not None:
            self.enabled = enabled
        if visible is not None:
            self.visible = visible
        alpha = 255 if self.visible else 0
        self.shape.color = ENABLED_FILL if self.enabled else DISABLED_FILL
        self.shape.border_color = ENABLED_BORDER if self.enabled else DISABLED_BORDER
        self.shape.opacity = alpha
        text_alpha = (255 if self.enabled else 140) if self.visible else 0
        self.label.color = (230, 230, 230, text_alpha)


class SidebarLayout:
    def __init__(
        self,
        *,
        x: float,
        y_top: float,
        width: float,
        padding: float = 12,
        spacing: float = 10,
    ) -> None:
        self.x = x + padding
        self.y_top = y_top - padding
        self.width = max(0.0, width - 2 * padding)
        self.spacing = spacing
        self._cursor = self.y_top

    def add_label(
        self,
        text: str,
        *,
        font_size: int,
        color: tuple[int, int, int, int],
        batch: pyglet.graphics.Batch,
    ) -> pyglet.text.Label:
        label = pyglet.text.Label(
            text,
            x=self.x,
            y=self._cursor,
            anchor_x="left",
            anchor_y="top",
            font_size=font_size,
            color=color,
            batch=batch,
        )
        height = max(label.content_height, float(font_size))
        self._cursor -= height + self.spacing
        return label

    def add_spacer(self, height: float) -> None:
        self._cursor -= max(0.0, height)

    def add_box(self, height: float) -> tuple[float, float, float, float]:
        box_height = max(0.0, height)
        y = self._cursor - box_height
        bounds = (self.x, y, self.width, box_height)
        self._cursor -= box_height + self.spacing
        return bounds

    def add_button(
        self,
        text: str,
        *,
        batch: pyglet.graphics.Batch,
        height: float = 28,
        font_size: int = 11,
    ) -> MenuButton:
        x, y, w, h = self.add_box(height)
        shape = pyglet.shapes.BorderedRectangle(
            x,
            y,
            w,
            h,
            border=2,
            color=ENABLED_FILL,
            border_color=ENABLED_BORDER,
            batch=batch,
        )
        label = pyglet.text.Label(
            text,
            x=x + 8,
            y=y + h / 2,
            anchor_x="left",
            anchor_y="center",
            font_size=font_size,
            color=(230, 230, 230, 255),
            batch=batch,
        )
        return MenuButton(shape=shape, label=label, bounds=(x, y, w, h))
