"""
Map Renderer - full-scene repaint of the research map.

Every call to ``render`` clears the surface and draws, in this order:
1. connections (line, arrowhead at the target, optional midpoint label)
2. nodes (filled circle, truncated title, kind label under the circle)
3. highlight rings around the selected node and the connection anchor
4. the in-progress connection preview from the anchor to the pointer

Rendering is a pure read of (store, viewport, interaction state, pointer).
There is no partial redraw.
"""

import math
from typing import Optional, Tuple

from research_map.graph import Node, Connection
from research_map.graph_store import GraphStore
from research_map.constants import (
    CONNECTION_COLORS,
    FALLBACK_CONNECTION_COLOR,
    BASE_LINE_WIDTH,
    ARROW_SIZE,
    HIGHLIGHT_PADDING,
    HIGHLIGHT_COLOR,
    PREVIEW_LINE_COLOR,
    TITLE_MAX_CHARS,
    TITLE_FONT_SIZE,
    KIND_FONT_SIZE,
    LABEL_FONT_SIZE,
    LABEL_BOX_WIDTH,
    LABEL_BOX_HEIGHT,
    KIND_LABEL_GAP,
)
from research_map.edit.transform import Viewport
from research_map.edit.hit_test import screen_radius
from research_map.edit.surface import Surface
from research_map.edit.controller import (
    InteractionState,
    Idle,
    selected_node_id,
    anchor_node_id,
)

Point = Tuple[float, float]

NODE_TEXT_COLOR = '#FFFFFF'
KIND_TEXT_COLOR = 'rgba(255, 255, 255, 0.8)'
LABEL_BOX_COLOR = '#FFFFFF'
LABEL_TEXT_COLOR = '#000000'


def connection_color(kind: str) -> str:
    return CONNECTION_COLORS.get(kind, FALLBACK_CONNECTION_COLOR)


def connection_endpoints(source: Node, target: Node, viewport: Viewport) -> Optional[Tuple[Point, Point]]:
    """
    Screen-space start/end of a connection, pulled in by each node's radius
    along the unit direction so the line meets the circle edges.

    Returns None when both centers coincide on screen (no direction).
    """
    sx, sy = viewport.world_to_screen(source.position)
    tx, ty = viewport.world_to_screen(target.position)
    dx, dy = tx - sx, ty - sy
    length = math.sqrt(dx * dx + dy * dy)
    if length == 0:
        return None

    ndx, ndy = dx / length, dy / length
    source_r = screen_radius(source, viewport)
    target_r = screen_radius(target, viewport)
    start = (sx + ndx * source_r, sy + ndy * source_r)
    end = (tx - ndx * target_r, ty - ndy * target_r)
    return start, end


def arrowhead(start: Point, end: Point, size: float) -> Tuple[Point, Point, Point]:
    """Triangle with its tip at ``end``, wings at ±30 degrees."""
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    left = (end[0] - size * math.cos(angle - math.pi / 6),
            end[1] - size * math.sin(angle - math.pi / 6))
    right = (end[0] - size * math.cos(angle + math.pi / 6),
             end[1] - size * math.sin(angle + math.pi / 6))
    return end, left, right


class MapRenderer:
    """Draws a GraphStore onto a Surface under a Viewport."""

    def __init__(self, surface: Surface):
        self.surface = surface

    def render(self, store: GraphStore, viewport: Viewport,
               state: Optional[InteractionState] = None,
               pointer: Optional[Point] = None) -> Surface:
        state = state or Idle()
        surface = self.surface
        surface.clear()

        for connection in store.connections:
            self.draw_connection(store, connection, viewport)

        for node in store.nodes:
            self.draw_node(node, viewport)

        anchor_id = anchor_node_id(state)
        ringed = [nid for nid in (selected_node_id(state), anchor_id) if nid]
        for node_id in dict.fromkeys(ringed):
            node = store.get_node(node_id)
            if node:
                self.draw_highlight(node, viewport)

        if anchor_id and pointer is not None:
            anchor = store.get_node(anchor_id)
            if anchor:
                self.draw_preview(anchor, pointer, viewport)

        return surface

    def draw_connection(self, store: GraphStore, connection: Connection, viewport: Viewport):
        source = store.get_node(connection.source_node_id)
        target = store.get_node(connection.target_node_id)
        if not source or not target:
            return

        endpoints = connection_endpoints(source, target, viewport)
        if endpoints is None:
            return
        start, end = endpoints
        color = connection_color(connection.kind)

        self.surface.line(start, end, color, BASE_LINE_WIDTH * viewport.zoom * connection.strength)
        self.surface.fill_polygon(arrowhead(start, end, ARROW_SIZE * viewport.zoom), color)

        if connection.label:
            mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
            top_left = (mid[0] - LABEL_BOX_WIDTH / 2, mid[1] - LABEL_BOX_HEIGHT / 2)
            self.surface.fill_rect(top_left, LABEL_BOX_WIDTH, LABEL_BOX_HEIGHT, LABEL_BOX_COLOR)
            self.surface.stroke_rect(top_left, LABEL_BOX_WIDTH, LABEL_BOX_HEIGHT, color, 1)
            self.surface.text(mid, connection.label, LABEL_TEXT_COLOR, LABEL_FONT_SIZE * viewport.zoom)

    def draw_node(self, node: Node, viewport: Viewport):
        center = viewport.world_to_screen(node.position)
        radius = screen_radius(node, viewport)

        self.surface.fill_circle(center, radius, node.color)
        self.surface.text(center, node.title[:TITLE_MAX_CHARS], NODE_TEXT_COLOR,
                          TITLE_FONT_SIZE * viewport.zoom)
        self.surface.text((center[0], center[1] + radius + KIND_LABEL_GAP), node.kind,
                          KIND_TEXT_COLOR, KIND_FONT_SIZE * viewport.zoom)

    def draw_highlight(self, node: Node, viewport: Viewport):
        center = viewport.world_to_screen(node.position)
        self.surface.stroke_circle(center, screen_radius(node, viewport) + HIGHLIGHT_PADDING,
                                   HIGHLIGHT_COLOR, 2)

    def draw_preview(self, anchor: Node, pointer: Point, viewport: Viewport):
        self.surface.line(viewport.world_to_screen(anchor.position), pointer, PREVIEW_LINE_COLOR, 2)
