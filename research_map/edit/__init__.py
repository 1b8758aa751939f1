"""
Interactive editing layer for the research map.

This package provides the canvas pipeline:
- Viewport: world <-> screen transform (pan/zoom)
- hit_test: topmost node under the pointer
- MapController: interaction state machine and graph mutation
- MapRenderer: full-scene repaint onto a Surface
- handlers: NiceGUI event wiring (import research_map.edit.handlers directly)

Usage:
    from research_map.edit import MapController, MapRenderer, Viewport
    from research_map.edit.handlers import setup_map_handlers
"""

from research_map.edit.transform import Viewport, world_to_screen, screen_to_world
from research_map.edit.hit_test import hit_test, base_radius
from research_map.edit.surface import Surface, SvgSurface, RecordingSurface
from research_map.edit.controller import (
    MapController,
    InteractionState,
    Idle,
    NodeSelected,
    ConnectingAwaitingTarget,
    Panning,
)
from research_map.edit.renderer import MapRenderer

__all__ = [
    'Viewport',
    'world_to_screen',
    'screen_to_world',
    'hit_test',
    'base_radius',
    'Surface',
    'SvgSurface',
    'RecordingSurface',
    'MapController',
    'InteractionState',
    'Idle',
    'NodeSelected',
    'ConnectingAwaitingTarget',
    'Panning',
    'MapRenderer',
]
