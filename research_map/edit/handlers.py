"""
Map Handlers - NiceGUI event handlers for the research map canvas.

This module keeps pointer/keyboard plumbing out of app.py. Raw NiceGUI event
arguments are normalized first (they may arrive as event objects, dicts or
lists depending on the element), then dispatched to the MapController. The
controller's change callback repaints the canvas and, when the visible
panel data changed, refreshes the side panels.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from research_map.session import MapSession

logger = logging.getLogger(__name__)

POINTER_DOWN = 'mousedown'
POINTER_MOVE = 'mousemove'
POINTER_UP = 'mouseup'
POINTER_LEAVE = 'mouseleave'

CANVAS_EVENTS = [POINTER_DOWN, POINTER_MOVE, POINTER_UP, POINTER_LEAVE]


def normalize_mouse_event(event: Any) -> Optional[Tuple[str, float, float, int]]:
    """
    Reduce a mouse event to ``(type, x, y, button)`` in canvas pixels.

    Accepts NiceGUI MouseEventArguments, plain dicts, or ``[type, x, y]``
    lists. Returns None for anything unusable.
    """
    raw = event.args if hasattr(event, 'args') and not hasattr(event, 'image_x') else event

    if hasattr(raw, 'image_x'):
        etype, x, y = getattr(raw, 'type', None), raw.image_x, raw.image_y
        button = getattr(raw, 'button', 0)
    elif isinstance(raw, dict):
        etype = raw.get('type')
        x = raw.get('image_x', raw.get('offsetX', raw.get('x')))
        y = raw.get('image_y', raw.get('offsetY', raw.get('y')))
        button = raw.get('button', 0)
    elif isinstance(raw, (list, tuple)) and len(raw) >= 3:
        etype, x, y = raw[0], raw[1], raw[2]
        button = raw[3] if len(raw) > 3 else 0
    else:
        return None

    if etype not in CANVAS_EVENTS:
        return None
    try:
        return etype, float(x), float(y), int(button or 0)
    except (TypeError, ValueError):
        return None


def normalize_key_event(event: Any) -> Optional[Tuple[str, bool]]:
    """Reduce a keyboard event to ``(key_name, is_keydown)``."""
    if isinstance(event, dict):
        key = event.get('key')
        keydown = event.get('action', 'keydown') == 'keydown'
    else:
        key = getattr(event, 'key', None)
        action = getattr(event, 'action', None)
        keydown = bool(getattr(action, 'keydown', False))
    if key is None:
        return None
    return str(getattr(key, 'name', key)), keydown


def dispatch_mouse(session: MapSession, event: Any) -> bool:
    """Route one mouse event to the controller. Returns False if ignored."""
    normalized = normalize_mouse_event(event)
    if normalized is None:
        logger.debug(f"Ignored unusable mouse event: {event!r}")
        return False
    etype, x, y, button = normalized
    controller = session.controller

    if etype == POINTER_DOWN:
        if button != 0:
            return False
        controller.pointer_down(x, y)
    elif etype == POINTER_MOVE:
        controller.pointer_move(x, y)
    else:
        controller.pointer_up(x, y)
    return True


def dispatch_key(session: MapSession, event: Any) -> bool:
    """Escape cancels connect mode / selection, Delete removes the selected node."""
    normalized = normalize_key_event(event)
    if normalized is None:
        return False
    key, keydown = normalized
    if not keydown:
        return False

    if key == 'Escape':
        session.controller.cancel()
        return True
    if key == 'Delete':
        return session.controller.delete_selected_node()
    return False


def setup_map_handlers(session: MapSession, canvas, refresh_panels: Callable[[], None]) -> Dict[str, Callable]:
    """
    Wire the session to a ``ui.interactive_image`` canvas.

    Args:
        session: MapSession for this page
        canvas: interactive_image element whose ``content`` receives the SVG
        refresh_panels: rebuilds toolbar counts and the selected-node panel

    Returns:
        Dict with handler functions for binding to UI events
    """
    last_view = {'key': None}

    def redraw(_controller=None):
        canvas.content = session.render_svg()
        key = session.view_key()
        if key != last_view['key']:
            last_view['key'] = key
            refresh_panels()

    session.controller.set_on_change(redraw)

    def handle_mouse(event):
        dispatch_mouse(session, event)

    def handle_keyboard(event):
        dispatch_key(session, event)

    return {
        'handle_mouse': handle_mouse,
        'handle_keyboard': handle_keyboard,
        'redraw': redraw,
    }
