"""
Map Controller - single owner of interaction state for one editing session.

The controller turns pointer and command events into:
- transitions between the four interaction states below
- viewport changes (pan, zoom)
- graph mutations on the GraphStore (create connection, delete, patch)

Interaction state is an explicit tagged union of frozen dataclasses. Every
public method handles every state, so there is no combination of flags that
can leave the editor stuck. Commands that reference ids no longer in the
store are silent no-ops.

After any event that changed graph, viewport or interaction state, the
``on_change`` callback fires once so the caller can repaint.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

from research_map.graph import make_connection, Connection
from research_map.graph_store import GraphStore
from research_map.constants import (
    DEFAULT_CONNECTION_KIND,
    DEFAULT_CONNECTION_STRENGTH,
    DEFAULT_CONNECTION_LABEL,
)
from research_map.edit.transform import Viewport
from research_map.edit.hit_test import hit_test

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class NodeSelected:
    node_id: str


@dataclass(frozen=True)
class ConnectingAwaitingTarget:
    """Connect mode. ``anchor_id`` is None until the first node is clicked."""
    anchor_id: Optional[str] = None
    selected_id: Optional[str] = None


@dataclass(frozen=True)
class Panning:
    last_pointer: Point


InteractionState = Union[Idle, NodeSelected, ConnectingAwaitingTarget, Panning]


def selected_node_id(state: InteractionState) -> Optional[str]:
    if isinstance(state, NodeSelected):
        return state.node_id
    if isinstance(state, ConnectingAwaitingTarget):
        return state.selected_id
    return None


def anchor_node_id(state: InteractionState) -> Optional[str]:
    if isinstance(state, ConnectingAwaitingTarget):
        return state.anchor_id
    return None


def is_connecting(state: InteractionState) -> bool:
    return isinstance(state, ConnectingAwaitingTarget)


class MapController:
    """Interaction state machine driving a GraphStore and a Viewport."""

    def __init__(self, store: GraphStore, viewport: Optional[Viewport] = None):
        self.store = store
        self.viewport = viewport or Viewport()
        self._state: InteractionState = Idle()
        self._pointer: Optional[Point] = None
        self._on_change: Optional[Callable[['MapController'], None]] = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def pointer(self) -> Optional[Point]:
        """Last pointer position in screen space (None before any pointer event)."""
        return self._pointer

    @property
    def selected_node_id(self) -> Optional[str]:
        return selected_node_id(self._state)

    @property
    def anchor_node_id(self) -> Optional[str]:
        return anchor_node_id(self._state)

    @property
    def is_connecting(self) -> bool:
        return is_connecting(self._state)

    def set_on_change(self, callback: Callable[['MapController'], None]):
        self._on_change = callback

    def _notify_change(self):
        if self._on_change:
            self._on_change(self)

    def _set_state(self, new_state: InteractionState) -> bool:
        if new_state == self._state:
            return False
        logger.debug(f"Interaction state {self._state} -> {new_state}")
        self._state = new_state
        return True

    def _drop_stale_references(self) -> bool:
        """Fall back to Idle when the state points at a node that is gone."""
        state = self._state
        referenced = [nid for nid in (selected_node_id(state), anchor_node_id(state)) if nid]
        if any(not self.store.has_node(nid) for nid in referenced):
            return self._set_state(Idle())
        return False

    # --- Pointer events ---

    def pointer_down(self, x: float, y: float) -> InteractionState:
        self._pointer = (x, y)
        self._drop_stale_references()
        state = self._state
        hit = hit_test((x, y), self.store.nodes, self.viewport)

        if hit is None:
            # Empty canvas always starts a pan, discarding selection and connect mode
            if isinstance(state, ConnectingAwaitingTarget):
                logger.debug("Connect mode cancelled by click on empty canvas")
            self._set_state(Panning(last_pointer=(x, y)))
            self._notify_change()
            return self._state

        if isinstance(state, ConnectingAwaitingTarget):
            if state.anchor_id is None:
                self._set_state(ConnectingAwaitingTarget(anchor_id=hit, selected_id=state.selected_id))
            elif state.anchor_id == hit:
                # Same node again: no self-loop, anchor stays armed
                logger.debug(f"Ignored connection from {hit} to itself")
            else:
                self._complete_connection(state.anchor_id, hit)
                self._set_state(Idle())
        else:
            self._set_state(NodeSelected(node_id=hit))

        self._notify_change()
        return self._state

    def pointer_move(self, x: float, y: float) -> InteractionState:
        self._pointer = (x, y)
        state = self._state

        if isinstance(state, Panning):
            dx = x - state.last_pointer[0]
            dy = y - state.last_pointer[1]
            self.viewport.pan(dx, dy)
            self._set_state(Panning(last_pointer=(x, y)))
            self._notify_change()
        elif isinstance(state, ConnectingAwaitingTarget) and state.anchor_id is not None:
            # Preview line follows the pointer
            self._notify_change()
        return self._state

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> InteractionState:
        """Pointer released (or left the canvas). Ends a pan; otherwise no change."""
        if x is not None and y is not None:
            self._pointer = (x, y)
        if isinstance(self._state, Panning):
            self._set_state(Idle())
            self._notify_change()
        return self._state

    # --- Commands ---

    def toggle_connect_mode(self) -> InteractionState:
        self._drop_stale_references()
        state = self._state
        if isinstance(state, ConnectingAwaitingTarget):
            self._set_state(Idle())
        elif isinstance(state, NodeSelected):
            self._set_state(ConnectingAwaitingTarget(selected_id=state.node_id))
        else:
            # Idle, or Panning (the pan ends)
            self._set_state(ConnectingAwaitingTarget())
        self._notify_change()
        return self._state

    def cancel(self) -> InteractionState:
        """Escape: leave connect mode, drop the selection, end a pan."""
        if self._set_state(Idle()):
            self._notify_change()
        return self._state

    def deselect(self) -> InteractionState:
        """Close the node panel. In connect mode the anchor stays armed."""
        state = self._state
        if isinstance(state, NodeSelected):
            self._set_state(Idle())
        elif isinstance(state, ConnectingAwaitingTarget) and state.selected_id is not None:
            self._set_state(ConnectingAwaitingTarget(anchor_id=state.anchor_id))
        else:
            return state
        self._notify_change()
        return self._state

    def delete_selected_node(self) -> bool:
        """Remove the selected node (and its connections), then go Idle."""
        self._drop_stale_references()
        node_id = selected_node_id(self._state)
        if node_id is None:
            logger.debug(f"delete_selected_node ignored in state {self._state}")
            return False
        removed = self.store.remove_node(node_id)
        self._set_state(Idle())
        self._notify_change()
        return removed

    def delete_connection(self, connection_id: str) -> bool:
        """Remove one connection. Selection and mode are left as they are."""
        removed = self.store.remove_connection(connection_id)
        if removed:
            self._notify_change()
        return removed

    def update_selected_node(self, **patch: Any) -> bool:
        """Patch the selected node (size, color, ...). No-op without a selection."""
        self._drop_stale_references()
        node_id = selected_node_id(self._state)
        if node_id is None:
            return False
        updated = self.store.update_node(node_id, **patch)
        if updated:
            self._notify_change()
        return updated

    # --- Viewport commands ---

    def zoom_in(self) -> float:
        if self.viewport.zoom_in():
            self._notify_change()
        return self.viewport.zoom

    def zoom_out(self) -> float:
        if self.viewport.zoom_out():
            self._notify_change()
        return self.viewport.zoom

    def set_zoom(self, zoom: float) -> float:
        if self.viewport.set_zoom(zoom):
            self._notify_change()
        return self.viewport.zoom

    def reset_view(self):
        if self.viewport.reset():
            self._notify_change()

    def _complete_connection(self, source_id: str, target_id: str) -> Optional[Connection]:
        connection = self.store.add_connection(make_connection(
            source_id,
            target_id,
            kind=DEFAULT_CONNECTION_KIND,
            strength=DEFAULT_CONNECTION_STRENGTH,
            label=DEFAULT_CONNECTION_LABEL,
        ))
        if connection:
            logger.info(f"Created connection {connection.id}: {source_id} -> {target_id}")
        return connection
