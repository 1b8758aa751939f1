"""
Shared constants for the research map.

Radius table, palettes, viewport bounds and the defaults used when the
interaction layer creates a connection. Renderer, hit-tester and controller
all read from here so the canvas and the pointer logic agree.
"""

NODE_KINDS = ('topic', 'source', 'claim', 'expert', 'event')
NODE_SIZES = ('small', 'medium', 'large')
CONNECTION_KINDS = ('supports', 'contradicts', 'relates', 'cites')

# Base radius in pixels at zoom 1.0
NODE_RADII = {
    'small': 15,
    'medium': 20,
    'large': 30,
}

NODE_KIND_COLORS = {
    'topic': '#3B82F6',    # blue
    'source': '#10B981',   # green
    'claim': '#F59E0B',    # amber
    'expert': '#8B5CF6',   # purple
    'event': '#EF4444',    # red
}

# Material icon names for the side panel and legend
NODE_KIND_ICONS = {
    'topic': 'description',
    'source': 'description',
    'claim': 'error_outline',
    'expert': 'group',
    'event': 'schedule',
}

CONNECTION_COLORS = {
    'supports': 'rgba(16, 185, 129, 0.7)',
    'contradicts': 'rgba(239, 68, 68, 0.7)',
    'relates': 'rgba(59, 130, 246, 0.7)',
    'cites': 'rgba(139, 92, 246, 0.7)',
}
FALLBACK_CONNECTION_COLOR = 'rgba(107, 114, 128, 0.7)'

# Viewport
ZOOM_MIN = 0.5
ZOOM_MAX = 2.0
ZOOM_STEP = 0.1

# Connection created by the connect gesture
DEFAULT_CONNECTION_KIND = 'relates'
DEFAULT_CONNECTION_STRENGTH = 0.7
DEFAULT_CONNECTION_LABEL = 'Related'

# Drawing
BASE_LINE_WIDTH = 2
ARROW_SIZE = 8
HIGHLIGHT_PADDING = 4
HIGHLIGHT_COLOR = '#3B82F6'
PREVIEW_LINE_COLOR = 'rgba(59, 130, 246, 0.5)'
TITLE_MAX_CHARS = 15
TITLE_FONT_SIZE = 12
KIND_FONT_SIZE = 8
LABEL_FONT_SIZE = 10
LABEL_BOX_WIDTH = 80
LABEL_BOX_HEIGHT = 20
KIND_LABEL_GAP = 12

CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 600
