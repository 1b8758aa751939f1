"""
Main NiceGUI application for the research map.

Seeds a MapSession from a project file (or the built-in demo project),
paints it into a ui.interactive_image as SVG, and wires pointer/keyboard
events through research_map.edit.handlers. Side panels show counts, the
connect-mode hint, the selected node's details and a legend.
"""

import logging
import sys

from nicegui import ui
from dotenv import load_dotenv
load_dotenv()

from research_map.config import get_project_file, get_log_level, get_port
from research_map.constants import (
    NODE_KINDS,
    NODE_KIND_COLORS,
    NODE_KIND_ICONS,
    CONNECTION_KINDS,
    CONNECTION_COLORS,
)
from research_map.seed import load_project_file, demo_project, ProjectLoadError
from research_map.session import MapSession
from research_map.edit.handlers import setup_map_handlers, CANVAS_EVENTS

logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)
logger = logging.getLogger(__name__)

SIZE_OPTIONS = {'small': 'Small', 'medium': 'Medium', 'large': 'Large'}


def load_project():
    """
    Return (project, error_message). Falls back to the demo project when no
    project file is configured or the configured one cannot be loaded.
    """
    project_file = get_project_file()
    if not project_file:
        return demo_project(), None
    try:
        return load_project_file(project_file), None
    except ProjectLoadError as e:
        logger.error(f"Failed to load project {e.path}: {e}")
        return demo_project(), str(e)


def render_legend():
    with ui.card().classes('w-full'):
        ui.label('Map Legend').classes('font-semibold')
        with ui.row().classes('gap-6'):
            for kind in NODE_KINDS:
                with ui.row().classes('items-center gap-2'):
                    ui.element('div').classes('w-4 h-4 rounded-full').style(
                        f'background: {NODE_KIND_COLORS[kind]}')
                    ui.label(kind.capitalize()).classes('text-sm')
        ui.separator()
        ui.label('Connection Types').classes('text-sm font-medium')
        with ui.row().classes('gap-6'):
            for kind in CONNECTION_KINDS:
                with ui.row().classes('items-center gap-2'):
                    ui.element('div').classes('w-8 h-1').style(
                        f'background: {CONNECTION_COLORS[kind]}')
                    ui.label(kind.capitalize()).classes('text-sm')


@ui.page('/')
def main_page():
    ui.dark_mode().enable()

    project, load_error = load_project()
    session = MapSession.from_project(project)
    store, controller, viewport = session.store, session.controller, session.viewport

    # Mutated graph is available to persistence through store.snapshot()
    store.add_listener(lambda s: logger.debug(
        f"Map changed: {s.node_count} nodes, {s.connection_count} connections"))

    if load_error:
        ui.notify(f'{load_error}. Showing demo project.', type='negative', position='bottom')

    # --- Header ---

    @ui.refreshable
    def toolbar():
        with ui.row().classes('w-full items-center justify-between'):
            with ui.row().classes('items-center gap-2'):
                ui.button(icon='add', on_click=controller.zoom_in).props('flat dense').tooltip('Zoom in')
                ui.button(icon='remove', on_click=controller.zoom_out).props('flat dense').tooltip('Zoom out')
                ui.button(icon='open_with', on_click=controller.reset_view).props('flat dense').tooltip('Reset view')
                ui.label(f'Zoom: {viewport.zoom_percent}%').classes('text-sm text-gray-400')
            ui.label(f'{store.node_count} nodes • {store.connection_count} connections').classes(
                'text-sm text-gray-400')
            if controller.is_connecting:
                ui.button('Cancel Connection', on_click=controller.toggle_connect_mode).props('color=primary')
            else:
                ui.button('Create Connection', on_click=controller.toggle_connect_mode).props('outline')

    @ui.refreshable
    def connect_hint():
        if not controller.is_connecting:
            return
        text = ('Now click on another node to create a connection' if controller.anchor_node_id
                else 'Click on a node to start creating a connection')
        ui.label(text).classes('w-full p-3 rounded-lg bg-blue-900/30 text-blue-200 text-sm')

    @ui.refreshable
    def node_panel():
        node_id = controller.selected_node_id
        node = store.get_node(node_id) if node_id else None
        if node is None:
            return

        with ui.card().classes('w-full'):
            with ui.row().classes('w-full items-center justify-between'):
                with ui.row().classes('items-center gap-2'):
                    ui.icon(NODE_KIND_ICONS[node.kind]).style(f'color: {NODE_KIND_COLORS[node.kind]}')
                    ui.label(node.title).classes('font-semibold')
                with ui.row().classes('gap-1'):
                    ui.button(icon='delete', on_click=controller.delete_selected_node).props(
                        'flat dense color=negative').tooltip('Delete node')
                    ui.button(icon='close', on_click=controller.deselect).props('flat dense')

            ui.label('Description').classes('text-sm font-medium')
            ui.label(node.description or '').classes('text-sm text-gray-400')

            with ui.row().classes('w-full gap-4'):
                with ui.column():
                    ui.label('Type').classes('text-sm font-medium')
                    ui.label(node.kind.capitalize()).classes('text-sm text-gray-400')
                ui.select(SIZE_OPTIONS, value=node.size, label='Size',
                          on_change=lambda e: controller.update_selected_node(size=e.value)).classes('w-40')
                ui.color_input(label='Color', value=node.color,
                               on_change=lambda e: e.value and controller.update_selected_node(color=e.value))

            ui.label('Connections').classes('text-sm font-medium')
            links = store.connections_for(node.id)
            if not links:
                ui.label('No connections for this node').classes('text-sm text-gray-500')
            for connection, direction in links:
                other_id = connection.target_node_id if direction == 'to' else connection.source_node_id
                other = store.get_node(other_id)
                with ui.row().classes('w-full items-center justify-between p-2 rounded-lg bg-slate-700'):
                    with ui.row().classes('items-center gap-2'):
                        if other:
                            ui.icon(NODE_KIND_ICONS[other.kind]).style(
                                f'color: {NODE_KIND_COLORS[other.kind]}')
                        prefix = 'To: ' if direction == 'to' else 'From: '
                        ui.label(prefix + (other.title if other else 'Unknown')).classes('text-sm')
                        ui.badge(connection.kind).props('outline')
                    ui.button(icon='delete',
                              on_click=lambda _, cid=connection.id: controller.delete_connection(cid)).props(
                        'flat dense size=sm color=negative')

    def refresh_panels():
        toolbar.refresh()
        connect_hint.refresh()
        node_panel.refresh()

    # --- Layout ---

    with ui.column().classes('w-full max-w-[1240px] mx-auto gap-4 p-4'):
        with ui.row().classes('w-full items-baseline justify-between'):
            ui.label(project.get('title', 'Research Map')).classes('text-xl font-bold')
            ui.label('Visual map of connections between research elements').classes('text-sm text-gray-400')

        toolbar()
        connect_hint()

        canvas = ui.interactive_image(
            size=(session.width, session.height),
            events=CANVAS_EVENTS,
            cross=False,
        ).classes('w-full rounded-lg border border-slate-700')

        handlers = setup_map_handlers(session, canvas, refresh_panels)
        canvas.on_mouse(handlers['handle_mouse'])
        ui.keyboard(on_key=handlers['handle_keyboard'])

        node_panel()
        render_legend()

    handlers['redraw']()
    logger.info(f"Research map session started: {store.node_count} nodes")


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Research Map',
        port=get_port(),
        reload=not getattr(sys, 'frozen', False),
    )
