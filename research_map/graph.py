"""
Graph records for the research map.

Nodes and connections are plain dataclasses. The kind/size vocabularies are
closed sets expressed as Literal aliases and validated on construction.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Literal, Optional, Tuple
import uuid

from research_map.constants import (
    NODE_KINDS,
    NODE_SIZES,
    CONNECTION_KINDS,
    NODE_KIND_COLORS,
)

NodeKind = Literal['topic', 'source', 'claim', 'expert', 'event']
NodeSize = Literal['small', 'medium', 'large']
ConnectionKind = Literal['supports', 'contradicts', 'relates', 'cites']

Point = Tuple[float, float]


@dataclass
class Node:
    """One research artifact placed on the map (position is world space)."""
    id: str
    kind: NodeKind
    title: str
    description: str = ''
    item_id: Optional[str] = None
    position: Point = (0.0, 0.0)
    size: NodeSize = 'medium'
    color: str = ''

    def __post_init__(self):
        _check_choice('node kind', self.kind, NODE_KINDS)
        _check_choice('node size', self.size, NODE_SIZES)
        self.position = (float(self.position[0]), float(self.position[1]))
        if not self.color:
            self.color = NODE_KIND_COLORS[self.kind]


@dataclass
class Connection:
    """Directed edge source -> target. Strength is clamped to [0, 1]."""
    id: str
    source_node_id: str
    target_node_id: str
    kind: ConnectionKind = 'relates'
    strength: float = 1.0
    label: Optional[str] = None

    def __post_init__(self):
        _check_choice('connection kind', self.kind, CONNECTION_KINDS)
        self.strength = max(0.0, min(1.0, float(self.strength)))


def _check_choice(what: str, value: str, allowed: Tuple[str, ...]) -> None:
    if value not in allowed:
        raise ValueError(f"Unknown {what} '{value}', expected one of {', '.join(allowed)}")


def make_node(kind: str, title: str, description: str = '', item_id: Optional[str] = None,
              position: Point = (0.0, 0.0), size: str = 'medium', color: str = '',
              node_id: Optional[str] = None) -> Node:
    """
    Create a Node. When no id is given, it is derived from kind and item_id
    (``node-<kind>-<item_id>``) or falls back to a UUID4.
    """
    if node_id is None:
        node_id = f"node-{kind}-{item_id}" if item_id else f"node-{uuid.uuid4().hex}"
    return Node(
        id=node_id,
        kind=kind,
        title=title,
        description=description,
        item_id=item_id,
        position=position,
        size=size,
        color=color,
    )


def make_connection(source_node_id: str, target_node_id: str, kind: str = 'relates',
                    strength: float = 1.0, label: Optional[str] = None,
                    connection_id: Optional[str] = None) -> Connection:
    """Create a Connection with a fresh ``connection-<uuid>`` id unless one is given."""
    return Connection(
        id=connection_id or f"connection-{uuid.uuid4().hex}",
        source_node_id=source_node_id,
        target_node_id=target_node_id,
        kind=kind,
        strength=strength,
        label=label,
    )


def node_to_dict(node: Node) -> Dict[str, Any]:
    data = asdict(node)
    data['position'] = [node.position[0], node.position[1]]
    return data


def connection_to_dict(connection: Connection) -> Dict[str, Any]:
    return asdict(connection)


def node_from_dict(data: Dict[str, Any]) -> Node:
    pos = data.get('position') or (0.0, 0.0)
    return Node(
        id=data['id'],
        kind=data['kind'],
        title=data.get('title', ''),
        description=data.get('description', ''),
        item_id=data.get('item_id'),
        position=(pos[0], pos[1]),
        size=data.get('size', 'medium'),
        color=data.get('color', ''),
    )


def connection_from_dict(data: Dict[str, Any]) -> Connection:
    return Connection(
        id=data['id'],
        source_node_id=data['source_node_id'],
        target_node_id=data['target_node_id'],
        kind=data.get('kind', 'relates'),
        strength=data.get('strength', 1.0),
        label=data.get('label'),
    )
