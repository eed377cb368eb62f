"""Selection entries and the state managers that mutate them."""
from selection_engine.selection.models import Selection, SelectionEntry, selection_to_wire
from selection_engine.selection.state import (
    CategoryRatingManager,
    SelectionStateManager,
    ToggleResult,
)

__all__ = [
    "Selection",
    "SelectionEntry",
    "selection_to_wire",
    "SelectionStateManager",
    "CategoryRatingManager",
    "ToggleResult",
]
