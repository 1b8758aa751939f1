"""
One editing session of the research map.

Owns the graph store, the viewport, the interaction controller and the SVG
surface the renderer paints onto. Constructed once per page visit and
discarded with it.
"""

from typing import Any, Dict, Optional

from research_map.graph_store import GraphStore
from research_map.seed import build_store
from research_map.constants import CANVAS_WIDTH, CANVAS_HEIGHT
from research_map.edit.transform import Viewport
from research_map.edit.controller import MapController
from research_map.edit.renderer import MapRenderer
from research_map.edit.surface import SvgSurface


class MapSession:
    """Store + viewport + controller + renderer for one editor."""

    def __init__(self, store: Optional[GraphStore] = None,
                 width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.store = store or GraphStore()
        self.viewport = Viewport()
        self.controller = MapController(self.store, self.viewport)
        self.surface = SvgSurface(width, height)
        self.renderer = MapRenderer(self.surface)
        self.width = width
        self.height = height

    @classmethod
    def from_project(cls, project: Dict[str, Any], **kwargs) -> 'MapSession':
        return cls(store=build_store(project), **kwargs)

    def render(self) -> SvgSurface:
        self.renderer.render(self.store, self.viewport, self.controller.state, self.controller.pointer)
        return self.surface

    def render_svg(self) -> str:
        return self.render().to_svg()

    def view_key(self) -> tuple:
        """
        Everything the side panels display. Panels only rebuild when this
        changes, not on every pan frame. Color is left out: the color input
        edits it in place and must survive each keystroke.
        """
        selected = self.controller.selected_node_id
        node = self.store.get_node(selected) if selected else None
        return (
            type(self.controller.state).__name__,
            selected,
            self.controller.anchor_node_id,
            self.store.node_count,
            self.store.connection_count,
            self.viewport.zoom_percent,
            node.size if node else None,
        )
