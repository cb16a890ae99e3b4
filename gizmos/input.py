"""Keyboard and mouse state tracked from window events."""

from __future__ import annotations


class Input:
    """Current key, button and cursor state for one window.

    Attach it to a window that dispatches pyglet-style events. The cursor
    position is reported with the origin at the top-left corner and y
    growing downwards.
    """

    def __init__(self) -> None:
        self._keys: set[int] = set()
        self._buttons: set[int] = set()
        self._x = 0.0
        self._y = 0.0
        self._height = 0

    def attach(self, window) -> None:
        """Start receiving events from ``window``."""
        self._height = int(window.height)
        window.push_handlers(self)

    def is_key_pressed(self, key: int) -> bool:
        return key in self._keys

    def is_key_released(self, key: int) -> bool:
        return key not in self._keys

    def is_mouse_button_pressed(self, button: int) -> bool:
        return button in self._buttons

    def is_mouse_button_released(self, button: int) -> bool:
        return button not in self._buttons

    def mouse_position(self) -> tuple[float, float]:
        """Cursor position in pixels, measured from the top-left corner."""
        return self._x, self._height - self._y

    def _move(self, x: float, y: float) -> None:
        self._x = float(x)
        self._y = float(y)

    def on_key_press(self, symbol: int, modifiers: int) -> None:
        self._keys.add(symbol)

    def on_key_release(self, symbol: int, modifiers: int) -> None:
        self._keys.discard(symbol)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int) -> None:
        self._move(x, y)
        self._buttons.add(button)

    def on_mouse_release(self, x: float, y: float, button: int, modifiers: int) -> None:
        self._move(x, y)
        self._buttons.discard(button)

    def on_mouse_motion(self, x: float, y: float, dx: float, dy: float) -> None:
        self._move(x, y)

    def on_mouse_drag(
        self, x: float, y: float, dx: float, dy: float, buttons: int, modifiers: int
    ) -> None:
        self._move(x, y)

    def on_resize(self, width: int, height: int) -> None:
        self._height = int(height)