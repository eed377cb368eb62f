"""Test data builders shared across flattener tests."""
from datetime import datetime, timezone

from selection_engine.selection.models import SelectionEntry

FIXED_NOW = datetime(2024, 3, 15, 9, 30, 0, 123456, tzinfo=timezone.utc)
FIXED_STAMP = "2024-03-15T09:30:00.123Z"


def focus_selection(catalog, *node_ids):
    """Selection map for focus area ids, enriched from the catalog."""
    selection = {}
    for node_id in node_ids:
        node = catalog.get_node(node_id)
        selection[node_id] = SelectionEntry(
            label=node.label,
            level=node.level.value,
            parent_key=node.parent_id,
            children=node.child_ids or None,
        )
    return selection


def rated(**ratings):
    """Category selection map, e.g. ``rated(neck=3, knees=None)``."""
    return {
        category: SelectionEntry(label=category, level="category", rating=rating)
        for category, rating in ratings.items()
    }
