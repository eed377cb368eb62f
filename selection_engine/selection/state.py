"""Selection state mutation with cascade semantics.

Every mutation returns a new selection map; the caller's map is never touched.
Unknown node ids are accepted as opaque keys whose label is the id itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from selection_engine.core.logging import get_logger
from selection_engine.selection.models import Selection, SelectionEntry
from selection_engine.taxonomy.catalog import NodeLevel, TaxonomyCatalog, coerce_level

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle.

    Attributes:
        selection: The new selection map
        added: True if the node was added, False if it was removed
        expand: Child ids the UI may auto-expand after an add
        removed: Ids dropped from the map (the node first, then descendants)
    """

    selection: Selection
    added: bool
    expand: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


def _is_selected(selection: Mapping[str, SelectionEntry], node_id: str) -> bool:
    entry = selection.get(node_id)
    return entry is not None and entry.selected


class SelectionStateManager:
    """Toggle nodes of a multi-level taxonomy.

    Adding a node snapshots its label, parent and children from the catalog.
    Removing a node also removes every descendant entry, whether the user
    picked it explicitly or not.

    Example:
        >>> manager = SelectionStateManager(get_catalog("focus_area"))
        >>> result = manager.toggle({}, "upper_body", "primary")
        >>> result.expand
        ('chest', 'back', 'shoulders', 'biceps', 'triceps')
    """

    def __init__(self, catalog: TaxonomyCatalog) -> None:
        self.catalog = catalog

    def toggle(
        self,
        selection: Mapping[str, SelectionEntry],
        node_id: str,
        level: NodeLevel | str,
    ) -> ToggleResult:
        if _is_selected(selection, node_id):
            return self._remove(selection, node_id, level)
        return self._add(selection, node_id, level)

    def _add(
        self,
        selection: Mapping[str, SelectionEntry],
        node_id: str,
        level: NodeLevel | str,
    ) -> ToggleResult:
        resolved = coerce_level(level)
        children = self.catalog.get_children(node_id, level)
        entry = SelectionEntry(
            selected=True,
            label=self.catalog.label_for(node_id),
            level=resolved.value if resolved else str(level),
            parent_key=self.catalog.get_parent(node_id, level),
            children=children,
        )
        updated = dict(selection)
        updated[node_id] = entry

        logger.debug(
            "selection_toggled",
            domain=self.catalog.domain,
            node_id=node_id,
            level=entry.level,
            added=True,
            known=node_id in self.catalog,
        )
        return ToggleResult(selection=updated, added=True, expand=children or ())

    def _remove(
        self,
        selection: Mapping[str, SelectionEntry],
        node_id: str,
        level: NodeLevel | str,
    ) -> ToggleResult:
        doomed = {node_id, *self.catalog.get_all_descendants(node_id, level)}
        updated = {key: entry for key, entry in selection.items() if key not in doomed}
        removed = (node_id,) + tuple(
            key
            for key in self.catalog.get_all_descendants(node_id, level)
            if key in selection
        )

        logger.debug(
            "selection_toggled",
            domain=self.catalog.domain,
            node_id=node_id,
            added=False,
            removed=list(removed),
        )
        return ToggleResult(selection=updated, added=False, removed=removed)


class CategoryRatingManager:
    """Presence and 1-5 rating for single-level category domains.

    Ratings outside 1-5 are stored as given; range checks belong to the UI.
    """

    def __init__(self, catalog: TaxonomyCatalog) -> None:
        self.catalog = catalog

    def toggle_category(
        self, selection: Mapping[str, SelectionEntry], category_id: str
    ) -> ToggleResult:
        updated = dict(selection)
        if _is_selected(selection, category_id):
            del updated[category_id]
            logger.debug(
                "selection_toggled",
                domain=self.catalog.domain,
                node_id=category_id,
                added=False,
            )
            return ToggleResult(selection=updated, added=False, removed=(category_id,))

        node = self.catalog.get_node(category_id)
        updated[category_id] = SelectionEntry(
            selected=True,
            label=self.catalog.label_for(category_id),
            level=NodeLevel.CATEGORY.value,
            description=node.description if node else None,
        )
        logger.debug(
            "selection_toggled",
            domain=self.catalog.domain,
            node_id=category_id,
            added=True,
            known=node is not None,
        )
        return ToggleResult(selection=updated, added=True)

    def set_rating(
        self,
        selection: Mapping[str, SelectionEntry],
        category_id: str,
        rating: int | float,
    ) -> Selection:
        """Overwrite the rating of a category that is already present."""
        updated = dict(selection)
        entry = updated.get(category_id)
        if entry is None:
            logger.debug(
                "rating_ignored",
                domain=self.catalog.domain,
                node_id=category_id,
                reason="category not selected",
            )
            return updated

        updated[category_id] = entry.model_copy(update={"rating": rating})
        logger.debug(
            "rating_set",
            domain=self.catalog.domain,
            node_id=category_id,
            rating=rating,
        )
        return updated
