"""
Tests for the MapController interaction state machine.

The fixture graph is the two-node map used throughout: T1 (topic at world
(100, 100)) and S1 (source at world (150, 250)), zoom 1, no offset.
"""

import pytest

from research_map.graph import make_node, make_connection
from research_map.graph_store import GraphStore
from research_map.edit import (
    MapController,
    Idle,
    NodeSelected,
    ConnectingAwaitingTarget,
    Panning,
)

T1_SCREEN = (100, 100)
S1_SCREEN = (150, 250)
EMPTY_SCREEN = (600, 500)


@pytest.fixture
def store():
    s = GraphStore()
    s.add_node(make_node('topic', 'Topic One', node_id='T1', position=(100, 100)))
    s.add_node(make_node('source', 'Source One', node_id='S1', position=(150, 250)))
    return s


@pytest.fixture
def controller(store):
    return MapController(store)


def connect(controller, *clicks):
    controller.toggle_connect_mode()
    for point in clicks:
        controller.pointer_down(*point)
        controller.pointer_up(*point)


class TestSelection:

    def test_click_node_selects_it(self, controller):
        """Pointer down on a node selects it."""
        assert controller.pointer_down(*T1_SCREEN) == NodeSelected('T1')
        assert controller.selected_node_id == 'T1'

    def test_pointer_up_keeps_selection(self, controller):
        """Releasing over the selected node keeps it selected."""
        controller.pointer_down(*T1_SCREEN)
        assert controller.pointer_up(*T1_SCREEN) == NodeSelected('T1')

    def test_click_other_node_moves_selection(self, controller):
        """Clicking a second node moves the selection to it."""
        controller.pointer_down(*T1_SCREEN)
        controller.pointer_down(*S1_SCREEN)
        assert controller.state == NodeSelected('S1')

    def test_click_empty_canvas_clears_selection_and_pans(self, controller):
        """Clicking empty canvas drops the selection and starts a pan."""
        controller.pointer_down(*T1_SCREEN)
        state = controller.pointer_down(*EMPTY_SCREEN)
        assert state == Panning(last_pointer=EMPTY_SCREEN)
        assert controller.selected_node_id is None

    def test_deselect(self, controller):
        """Closing the panel returns to Idle."""
        controller.pointer_down(*T1_SCREEN)
        assert controller.deselect() == Idle()

    def test_update_selected_node(self, controller, store):
        """Size and color patches reach the store."""
        controller.pointer_down(*T1_SCREEN)
        assert controller.update_selected_node(size='large', color='#123456') is True
        assert store.get_node('T1').size == 'large'

    def test_update_without_selection_is_noop(self, controller):
        """Patching with nothing selected does nothing."""
        assert controller.update_selected_node(size='large') is False


class TestPanning:

    def test_drag_accumulates_offset(self, controller):
        """Each move adds its delta to the viewport offset."""
        controller.pointer_down(400, 400)
        controller.pointer_move(410, 395)
        controller.pointer_move(430, 390)
        assert controller.viewport.offset == (30, -10)
        assert controller.state == Panning(last_pointer=(430, 390))

    def test_pointer_up_returns_to_idle(self, controller):
        """Releasing ends the pan."""
        controller.pointer_down(400, 400)
        assert controller.pointer_up(400, 400) == Idle()

    def test_move_without_pan_leaves_viewport(self, controller):
        """Hovering does not move the view."""
        controller.pointer_move(50, 50)
        assert controller.viewport.offset == (0, 0)
        assert controller.state == Idle()

    def test_panned_nodes_are_hit_at_new_position(self, controller):
        """Hit-testing follows the panned offset."""
        controller.pointer_down(400, 400)
        controller.pointer_move(450, 400)
        controller.pointer_up(450, 400)
        assert controller.pointer_down(150, 100) == NodeSelected('T1')


class TestConnecting:

    def test_click_hit_tests_t1(self, controller):
        """T1 is hit at its screen center."""
        assert controller.pointer_down(*T1_SCREEN) == NodeSelected('T1')

    def test_toggle_enters_connect_mode_without_anchor(self, controller):
        """Toggling from Idle arms connect mode with no anchor."""
        assert controller.toggle_connect_mode() == ConnectingAwaitingTarget()
        assert controller.anchor_node_id is None

    def test_toggle_from_selection_keeps_ring(self, controller):
        """Toggling with a node selected keeps it as the selected node."""
        controller.pointer_down(*T1_SCREEN)
        state = controller.toggle_connect_mode()
        assert state == ConnectingAwaitingTarget(anchor_id=None, selected_id='T1')

    def test_create_connection(self, controller, store):
        """Anchor then target creates a default 'relates' connection."""
        connect(controller, T1_SCREEN, S1_SCREEN)

        assert controller.state == Idle()
        assert store.connection_count == 1
        conn = store.connections[0]
        assert (conn.source_node_id, conn.target_node_id) == ('T1', 'S1')
        assert conn.kind == 'relates'
        assert conn.strength == pytest.approx(0.7)
        assert conn.label == 'Related'

    def test_same_node_twice_keeps_anchor(self, controller, store):
        """Clicking the anchor again creates nothing and keeps it armed."""
        connect(controller, T1_SCREEN, T1_SCREEN)

        assert store.connection_count == 0
        assert controller.state == ConnectingAwaitingTarget(anchor_id='T1')
        assert controller.anchor_node_id == 'T1'

    def test_same_node_then_other_node_connects(self, controller, store):
        """The anchor survives a repeated click and still connects."""
        connect(controller, T1_SCREEN, T1_SCREEN, S1_SCREEN)
        assert store.connection_count == 1

    def test_empty_canvas_cancels_and_pans(self, controller, store):
        """Clicking empty canvas while connecting discards connect mode."""
        controller.toggle_connect_mode()
        controller.pointer_down(*T1_SCREEN)
        state = controller.pointer_down(*EMPTY_SCREEN)

        assert state == Panning(last_pointer=EMPTY_SCREEN)
        assert not controller.is_connecting
        controller.pointer_up(*EMPTY_SCREEN)
        controller.pointer_down(*S1_SCREEN)
        assert store.connection_count == 0
        assert controller.state == NodeSelected('S1')

    def test_toggle_again_cancels(self, controller):
        """A second toggle leaves connect mode."""
        controller.toggle_connect_mode()
        controller.pointer_down(*T1_SCREEN)
        assert controller.toggle_connect_mode() == Idle()
        assert controller.anchor_node_id is None

    def test_toggle_while_panning_ends_pan(self, controller):
        """Toggling mid-pan ends the pan."""
        controller.pointer_down(*EMPTY_SCREEN)
        assert controller.toggle_connect_mode() == ConnectingAwaitingTarget()
        controller.pointer_move(700, 600)
        assert controller.viewport.offset == (0, 0)

    def test_escape_cancels(self, controller):
        """Cancel returns to Idle from connect mode."""
        connect(controller, T1_SCREEN)
        assert controller.cancel() == Idle()

    def test_pointer_is_tracked_for_preview(self, controller):
        """The preview line endpoint follows the pointer."""
        connect(controller, T1_SCREEN)
        controller.pointer_move(300, 320)
        assert controller.pointer == (300, 320)

    def test_deselect_in_connect_mode_keeps_anchor(self, controller):
        """Closing the panel while connecting only drops the selection."""
        controller.pointer_down(*T1_SCREEN)
        controller.toggle_connect_mode()
        controller.pointer_down(*S1_SCREEN)

        assert controller.deselect() == ConnectingAwaitingTarget(anchor_id='S1')
        assert controller.selected_node_id is None
        assert controller.anchor_node_id == 'S1'

    def test_deselect_in_connect_mode_notifies(self, controller):
        """Dropping the selection in connect mode triggers a repaint."""
        controller.pointer_down(*T1_SCREEN)
        controller.toggle_connect_mode()
        calls = []
        controller.set_on_change(lambda c: calls.append(c.state))

        controller.deselect()
        assert calls == [ConnectingAwaitingTarget()]
        controller.deselect()
        assert len(calls) == 1


class TestDeletion:

    def test_delete_selected_node_cascades(self, controller, store):
        """Deleting the selected node removes its connections too."""
        connect(controller, T1_SCREEN, S1_SCREEN)
        controller.pointer_down(*T1_SCREEN)

        assert controller.delete_selected_node() is True
        assert controller.state == Idle()
        assert store.connections == []
        assert store.get_node('T1') is None

    def test_delete_without_selection_is_noop(self, controller, store):
        """Delete with nothing selected does nothing."""
        assert controller.delete_selected_node() is False
        assert store.node_count == 2

    def test_delete_in_connect_mode_without_selection_is_noop(self, controller, store):
        """An armed anchor is not a selection."""
        connect(controller, T1_SCREEN)
        assert controller.delete_selected_node() is False
        assert store.node_count == 2
        assert controller.anchor_node_id == 'T1'

    def test_delete_selection_kept_in_connect_mode(self, controller, store):
        """The node still shown in the panel while connecting can be deleted."""
        store.add_connection(make_connection('S1', 'T1'))
        controller.pointer_down(*T1_SCREEN)
        controller.toggle_connect_mode()

        assert controller.delete_selected_node() is True
        assert controller.state == Idle()
        assert store.get_node('T1') is None
        assert store.connections == []

    def test_double_delete_is_silent(self, controller, store):
        """A second delete finds no selection."""
        controller.pointer_down(*T1_SCREEN)
        controller.delete_selected_node()
        assert controller.delete_selected_node() is False
        assert store.node_count == 1

    def test_delete_connection_keeps_selection(self, controller, store):
        """Removing a connection leaves the interaction state alone."""
        conn = store.add_connection(make_connection('T1', 'S1'))
        controller.pointer_down(*T1_SCREEN)

        assert controller.delete_connection(conn.id) is True
        assert controller.state == NodeSelected('T1')
        assert controller.delete_connection(conn.id) is False

    def test_externally_removed_selection_falls_back_to_idle(self, controller, store):
        """A selection pointing at a removed node is dropped."""
        controller.pointer_down(*T1_SCREEN)
        store.remove_node('T1')
        assert controller.toggle_connect_mode() == ConnectingAwaitingTarget()


class TestZoomAndNotifications:

    def test_zoom_commands(self, controller):
        """Zoom steps by 0.1 and stops at 2.0."""
        for _ in range(3):
            controller.zoom_in()
        assert controller.viewport.zoom == pytest.approx(1.3)
        for _ in range(20):
            controller.zoom_in()
        assert controller.viewport.zoom == 2.0

    def test_zoom_changes_hit_area(self, controller):
        """Hit radius scales with zoom."""
        controller.set_zoom(2.0)
        # T1 now centered at (200, 200) with radius 40
        assert controller.pointer_down(235, 200) == NodeSelected('T1')

    def test_on_change_fires_for_state_changes(self, controller):
        """Repaint is requested for selection and zoom, not plain hovering."""
        calls = []
        controller.set_on_change(lambda c: calls.append(type(c.state).__name__))

        controller.pointer_down(*T1_SCREEN)
        controller.pointer_move(101, 101)
        controller.zoom_in()
        assert calls == ['NodeSelected', 'NodeSelected']

    def test_on_change_not_fired_at_zoom_clamp(self, controller):
        """No repaint when zoom is already at the limit."""
        controller.set_zoom(2.0)
        calls = []
        controller.set_on_change(lambda c: calls.append(c.viewport.zoom))
        controller.zoom_in()
        assert calls == []
