"""
Initial node population for the research map.

A research project supplies topics, sources, claims and experts. Each record
becomes a ``(kind, title, description, item_id)`` seed, and each kind gets its
own horizontal band on the map:

    x = base_x + index * step_x
    y = row_y

Projects are plain dicts (as loaded from JSON) with ``topics``, ``sources``,
``claims`` and ``experts`` lists.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from research_map.graph import Node, make_node
from research_map.graph_store import GraphStore

logger = logging.getLogger(__name__)

# kind -> (base_x, step_x, row_y)
KIND_GRID = {
    'topic': (100, 150, 100),
    'source': (150, 120, 250),
    'claim': (200, 150, 400),
    'expert': (300, 180, 550),
}

CLAIM_TITLE_CHARS = 30


class ProjectLoadError(Exception):
    """Raised when a project file cannot be read or parsed."""
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class SeedRecord(NamedTuple):
    kind: str
    title: str
    description: str
    item_id: str


def _claim_title(statement: str) -> str:
    if len(statement) > CLAIM_TITLE_CHARS:
        return statement[:CLAIM_TITLE_CHARS] + '...'
    return statement


def records_from_project(project: Dict[str, Any]) -> List[SeedRecord]:
    """Flatten a project's records into seeds, grouped by kind in band order."""
    records = []
    for topic in project.get('topics', []):
        records.append(SeedRecord('topic', topic.get('name', ''), topic.get('description', ''), topic['id']))
    for source in project.get('sources', []):
        records.append(SeedRecord('source', source.get('title', ''), source.get('summary', ''), source['id']))
    for claim in project.get('claims', []):
        statement = claim.get('statement', '')
        records.append(SeedRecord('claim', _claim_title(statement), statement, claim['id']))
    for expert in project.get('experts', []):
        records.append(SeedRecord('expert', expert.get('name', ''), expert.get('title', ''), expert['id']))
    return records


def grid_position(kind: str, index: int) -> tuple:
    base_x, step_x, row_y = KIND_GRID[kind]
    return (base_x + index * step_x, row_y)


def seed_nodes(records: Iterable[SeedRecord]) -> List[Node]:
    """Lay out seeds on their kind bands. The index counts per kind."""
    counters: Dict[str, int] = {}
    nodes = []
    for record in records:
        if record.kind not in KIND_GRID:
            logger.warning(f"Skipping seed of unsupported kind '{record.kind}' ({record.item_id})")
            continue
        index = counters.get(record.kind, 0)
        counters[record.kind] = index + 1
        nodes.append(make_node(
            kind=record.kind,
            title=record.title,
            description=record.description,
            item_id=record.item_id,
            position=grid_position(record.kind, index),
            size='medium',
        ))
    return nodes


def build_store(project: Dict[str, Any]) -> GraphStore:
    """Fresh store seeded from a project."""
    store = GraphStore()
    added = store.add_nodes(seed_nodes(records_from_project(project)))
    logger.info(f"Seeded research map '{project.get('title', 'Untitled')}' with {added} nodes")
    return store


def load_project_file(path) -> Dict[str, Any]:
    """
    Read a project JSON file.

    Raises:
        ProjectLoadError: if the file is missing, unreadable or not a JSON object
    """
    project_path = Path(path)
    if not project_path.exists():
        raise ProjectLoadError(f"Project file not found: {project_path}", path=str(project_path))
    try:
        with open(project_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ProjectLoadError(f"Could not read project file {project_path}: {e}", path=str(project_path)) from e
    if not isinstance(data, dict):
        raise ProjectLoadError(f"Project file {project_path} must contain a JSON object", path=str(project_path))
    return data


def demo_project() -> Dict[str, Any]:
    """Small built-in project used when no project file is configured."""
    return {
        'id': 'demo',
        'title': 'Microplastics Documentary',
        'topics': [
            {'id': 't1', 'name': 'Ocean Pollution', 'description': 'Scale and sources of marine plastic waste.'},
            {'id': 't2', 'name': 'Human Health', 'description': 'Effects of microplastic exposure on people.'},
        ],
        'sources': [
            {'id': 's1', 'title': 'Marine Survey 2023', 'summary': 'Field sampling across three ocean basins.'},
            {'id': 's2', 'title': 'Toxicology Review', 'summary': 'Meta-analysis of exposure studies.'},
            {'id': 's3', 'title': 'Industry Report', 'summary': 'Packaging producers on recycling rates.'},
        ],
        'claims': [
            {'id': 'c1', 'statement': 'Most ocean microplastics come from degraded packaging.'},
            {'id': 'c2', 'statement': 'Recycling rates have doubled.'},
        ],
        'experts': [
            {'id': 'e1', 'name': 'Dr. Ana Ruiz', 'title': 'Marine Biologist'},
        ],
    }
