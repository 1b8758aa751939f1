"""
Tests for the GraphStore: node/connection mutators, cascade delete,
total (no-raise) behaviour on unknown ids, listeners and snapshots.
"""

import json

import pytest

from research_map.graph import make_node, make_connection
from research_map.graph_store import GraphStore


@pytest.fixture
def store():
    s = GraphStore()
    s.add_nodes([
        make_node('topic', 'Ocean Pollution', item_id='t1', position=(100, 100)),
        make_node('source', 'Marine Survey', item_id='s1', position=(150, 250)),
        make_node('claim', 'Packaging dominates', item_id='c1', position=(200, 400)),
    ])
    return s


class TestNodes:

    def test_nodes_keep_insertion_order(self, store):
        """nodes iterates in insertion order."""
        assert [n.id for n in store.nodes] == ['node-topic-t1', 'node-source-s1', 'node-claim-c1']

    def test_duplicate_id_is_rejected(self, store):
        """Adding an existing id changes nothing."""
        dup = make_node('event', 'Other', node_id='node-topic-t1')
        assert store.add_node(dup) is False
        assert store.get_node('node-topic-t1').title == 'Ocean Pollution'
        assert store.node_count == 3

    def test_default_color_follows_kind(self, store):
        """Nodes without a color take their kind color."""
        assert store.get_node('node-topic-t1').color == '#3B82F6'
        assert store.get_node('node-source-s1').color == '#10B981'

    def test_update_node_patches_fields(self, store):
        """Patched fields are stored."""
        assert store.update_node('node-topic-t1', size='large', color='#000000') is True
        node = store.get_node('node-topic-t1')
        assert node.size == 'large'
        assert node.color == '#000000'

    def test_update_unknown_node_is_noop(self, store):
        """Updating a missing id returns False."""
        assert store.update_node('missing', size='small') is False

    def test_update_rejects_unknown_field(self, store):
        """Unknown patch keys raise ValueError."""
        with pytest.raises(ValueError):
            store.update_node('node-topic-t1', kind='claim')

    def test_update_rejects_unknown_size(self, store):
        """Unknown sizes raise ValueError."""
        with pytest.raises(ValueError):
            store.update_node('node-topic-t1', size='huge')

    def test_remove_unknown_node_is_noop(self, store):
        """Removing a missing id returns False."""
        assert store.remove_node('missing') is False
        assert store.remove_node('missing') is False
        assert store.node_count == 3


class TestConnections:

    def test_add_connection(self, store):
        """A connection between existing nodes is stored."""
        conn = store.add_connection(make_connection('node-topic-t1', 'node-source-s1', kind='supports'))
        assert conn is not None
        assert store.get_connection(conn.id) is conn
        assert store.connection_count == 1

    def test_self_loop_rejected(self, store):
        """A node cannot connect to itself."""
        assert store.add_connection(make_connection('node-topic-t1', 'node-topic-t1')) is None
        assert store.connection_count == 0

    def test_missing_endpoint_rejected(self, store):
        """Both endpoints must exist."""
        assert store.add_connection(make_connection('node-topic-t1', 'ghost')) is None
        assert store.connection_count == 0

    def test_parallel_connections_allowed(self, store):
        """Two connections may join the same pair."""
        store.add_connection(make_connection('node-topic-t1', 'node-source-s1', kind='supports'))
        store.add_connection(make_connection('node-topic-t1', 'node-source-s1', kind='cites'))
        assert [c.kind for c in store.connections] == ['supports', 'cites']

    def test_remove_connection_twice(self, store):
        """The second removal is a no-op."""
        conn = store.add_connection(make_connection('node-topic-t1', 'node-source-s1'))
        assert store.remove_connection(conn.id) is True
        assert store.remove_connection(conn.id) is False
        assert store.connections == []

    def test_strength_is_clamped(self):
        """Strength is clamped to [0, 1]."""
        assert make_connection('a', 'b', strength=1.7).strength == 1.0
        assert make_connection('a', 'b', strength=-0.2).strength == 0.0

    def test_connections_for_reports_direction(self, store):
        """Connections touching a node report To/From."""
        out = store.add_connection(make_connection('node-topic-t1', 'node-source-s1'))
        inc = store.add_connection(make_connection('node-claim-c1', 'node-topic-t1'))
        store.add_connection(make_connection('node-source-s1', 'node-claim-c1'))

        links = store.connections_for('node-topic-t1')
        assert [(c.id, d) for c, d in links] == [(out.id, 'to'), (inc.id, 'from')]


class TestCascade:

    def test_remove_node_drops_every_referencing_connection(self, store):
        """Removing a node removes its connections."""
        store.add_connection(make_connection('node-topic-t1', 'node-source-s1'))
        store.add_connection(make_connection('node-claim-c1', 'node-topic-t1'))
        keep = store.add_connection(make_connection('node-source-s1', 'node-claim-c1'))

        assert store.remove_node('node-topic-t1') is True

        for conn in store.connections:
            assert 'node-topic-t1' not in (conn.source_node_id, conn.target_node_id)
        assert [c.id for c in store.connections] == [keep.id]

    def test_cascade_for_every_node(self, store):
        """No connection survives referencing a removed node."""
        ids = [n.id for n in store.nodes]
        for src in ids:
            for tgt in ids:
                if src != tgt:
                    store.add_connection(make_connection(src, tgt))

        for node_id in ids:
            store.remove_node(node_id)
            assert all(node_id not in (c.source_node_id, c.target_node_id) for c in store.connections)
        assert store.connection_count == 0


class TestListenersAndSnapshot:

    def test_listener_called_after_mutations_only(self, store):
        """Listeners fire on successful mutations only."""
        calls = []
        store.add_listener(lambda s: calls.append(s.node_count))

        store.remove_node('missing')
        assert calls == []

        store.remove_node('node-claim-c1')
        assert calls == [2]

    def test_snapshot_is_json_serializable(self, store):
        """Snapshots are plain JSON data."""
        store.add_connection(make_connection('node-topic-t1', 'node-source-s1', label='Related'))
        snap = store.snapshot()

        text = json.dumps(snap)
        assert 'node-topic-t1' in text
        assert snap['nodes'][0]['position'] == [100.0, 100.0]
        assert snap['connections'][0]['label'] == 'Related'

    def test_from_snapshot_restores_graph(self, store):
        """A snapshot rebuilds the same graph."""
        conn = store.add_connection(make_connection('node-topic-t1', 'node-source-s1'))
        restored = GraphStore.from_snapshot(store.snapshot())

        assert [n.id for n in restored.nodes] == [n.id for n in store.nodes]
        assert restored.get_connection(conn.id).target_node_id == 'node-source-s1'

    def test_from_snapshot_drops_dangling_connections(self):
        """Connections to missing nodes are dropped on restore."""
        data = {
            'nodes': [{'id': 'a', 'kind': 'topic', 'title': 'A'}],
            'connections': [{'id': 'c', 'source_node_id': 'a', 'target_node_id': 'gone'}],
        }
        restored = GraphStore.from_snapshot(data)
        assert restored.node_count == 1
        assert restored.connection_count == 0
