"""
Research map: an interactive node-link editor for research projects.

Nodes (topics, sources, claims, experts, events) and directed, typed
connections live in a GraphStore; the edit package renders them under a
pan/zoom viewport and turns pointer input into graph mutations.
"""

from research_map.graph import Node, Connection, make_node, make_connection
from research_map.graph_store import GraphStore

__version__ = "0.1.0"

__all__ = ['Node', 'Connection', 'make_node', 'make_connection', 'GraphStore']
