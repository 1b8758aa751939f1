"""
Graph store for the research map.

The store is the single source of truth for nodes and connections. It wraps a
NetworkX MultiDiGraph: nodes carry their ``Node`` record, edges are keyed by
connection id and carry their ``Connection`` record. Removing a node from the
MultiDiGraph drops its incident edges, which gives the cascade for free; the
connection index is cleaned alongside.

Every mutator is total. Missing ids are a no-op that returns False (or None
for ``add_connection``), never an exception, so rapid repeated UI commands
can't fail.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from research_map.graph import (
    Node,
    Connection,
    node_to_dict,
    connection_to_dict,
    node_from_dict,
    connection_from_dict,
)
from research_map.constants import NODE_SIZES

logger = logging.getLogger(__name__)

# Fields a caller may patch through update_node
UPDATABLE_NODE_FIELDS = ('title', 'description', 'size', 'color', 'position')


class GraphStore:
    """Mutable collection of nodes and directed connections."""

    def __init__(self):
        self.G = nx.MultiDiGraph()
        # connection id -> (source, target), in insertion order
        self._edge_index: Dict[str, Tuple[str, str]] = {}
        self._listeners: List[Callable[['GraphStore'], None]] = []

    # --- Listeners ---

    def add_listener(self, callback: Callable[['GraphStore'], None]) -> None:
        """Register a callback invoked after every successful mutation."""
        self._listeners.append(callback)

    def _notify_change(self):
        for callback in self._listeners:
            callback(self)

    # --- Queries ---

    @property
    def nodes(self) -> List[Node]:
        """All nodes in insertion order (also draw and hit-test order)."""
        return [attrs['node'] for _, attrs in self.G.nodes(data=True)]

    @property
    def connections(self) -> List[Connection]:
        """All connections in insertion order."""
        return [self.G.edges[src, tgt, cid]['connection']
                for cid, (src, tgt) in self._edge_index.items()]

    @property
    def node_count(self) -> int:
        return self.G.number_of_nodes()

    @property
    def connection_count(self) -> int:
        return len(self._edge_index)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.G

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self.G:
            return None
        return self.G.nodes[node_id]['node']

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        endpoints = self._edge_index.get(connection_id)
        if endpoints is None:
            return None
        return self.G.edges[endpoints[0], endpoints[1], connection_id]['connection']

    def connections_for(self, node_id: str) -> List[Tuple[Connection, str]]:
        """
        Connections touching a node, each paired with its direction relative
        to that node: ``'to'`` when the node is the source, ``'from'`` when it
        is the target. Insertion order is preserved.
        """
        result = []
        for conn in self.connections:
            if conn.source_node_id == node_id:
                result.append((conn, 'to'))
            elif conn.target_node_id == node_id:
                result.append((conn, 'from'))
        return result

    # --- Node mutators ---

    def add_node(self, node: Node) -> bool:
        """Add a node. Returns False if the id is already present."""
        if node.id in self.G:
            logger.debug(f"add_node ignored, id already present: {node.id}")
            return False
        self.G.add_node(node.id, node=node)
        self._notify_change()
        return True

    def add_nodes(self, nodes: Iterable[Node]) -> int:
        """Bulk add used for seeding. Notifies listeners once. Returns the number added."""
        added = 0
        for node in nodes:
            if node.id in self.G:
                logger.debug(f"add_nodes skipped duplicate id: {node.id}")
                continue
            self.G.add_node(node.id, node=node)
            added += 1
        if added:
            self._notify_change()
        return added

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and every connection referencing it."""
        if node_id not in self.G:
            logger.debug(f"remove_node ignored, unknown id: {node_id}")
            return False

        incident = list(self.G.out_edges(node_id, keys=True)) + list(self.G.in_edges(node_id, keys=True))
        for _, _, cid in incident:
            self._edge_index.pop(cid, None)
        self.G.remove_node(node_id)

        logger.info(f"Removed node {node_id} and {len(incident)} connection(s)")
        self._notify_change()
        return True

    def update_node(self, node_id: str, **patch: Any) -> bool:
        """
        Patch display fields of a node.

        Args:
            node_id: Node to update
            **patch: Any of title, description, size, color, position

        Returns:
            True if the node exists and was patched

        Raises:
            ValueError: for a field outside UPDATABLE_NODE_FIELDS or an unknown size
        """
        unknown = set(patch) - set(UPDATABLE_NODE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update node field(s): {', '.join(sorted(unknown))}")
        if 'size' in patch and patch['size'] not in NODE_SIZES:
            raise ValueError(f"Unknown node size '{patch['size']}'")

        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"update_node ignored, unknown id: {node_id}")
            return False

        for key, value in patch.items():
            if key == 'position':
                value = (float(value[0]), float(value[1]))
            setattr(node, key, value)
        self._notify_change()
        return True

    # --- Connection mutators ---

    def add_connection(self, connection: Connection) -> Optional[Connection]:
        """
        Add a connection between two existing, distinct nodes.

        Returns the stored connection, or None when an endpoint is missing,
        the connection is a self-loop, or its id is already taken.
        """
        src, tgt = connection.source_node_id, connection.target_node_id
        if src not in self.G or tgt not in self.G:
            logger.debug(f"add_connection ignored, missing endpoint: {src} -> {tgt}")
            return None
        if src == tgt:
            logger.debug(f"add_connection ignored, self-loop on {src}")
            return None
        if connection.id in self._edge_index:
            logger.debug(f"add_connection ignored, id already present: {connection.id}")
            return None

        self.G.add_edge(src, tgt, key=connection.id, connection=connection)
        self._edge_index[connection.id] = (src, tgt)
        self._notify_change()
        return connection

    def remove_connection(self, connection_id: str) -> bool:
        endpoints = self._edge_index.pop(connection_id, None)
        if endpoints is None:
            logger.debug(f"remove_connection ignored, unknown id: {connection_id}")
            return False
        self.G.remove_edge(endpoints[0], endpoints[1], key=connection_id)
        logger.info(f"Removed connection {connection_id}")
        self._notify_change()
        return True

    # --- Export ---

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-dict copy of the current graph, ready for json.dump by the caller."""
        return {
            'nodes': [node_to_dict(n) for n in self.nodes],
            'connections': [connection_to_dict(c) for c in self.connections],
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> 'GraphStore':
        """Rebuild a store from ``snapshot()`` output. Dangling connections are dropped."""
        store = cls()
        store.add_nodes(node_from_dict(n) for n in data.get('nodes', []))
        for c in data.get('connections', []):
            store.add_connection(connection_from_dict(c))
        return store
