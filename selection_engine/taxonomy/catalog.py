"""Read-only taxonomy catalog with precomputed hierarchy indices.

A taxonomy is a forest of nodes, either three levels deep (primary ->
secondary -> tertiary) or a single level of rated categories. The catalog is
built once per process, validated on construction, and never mutated
afterwards, so one instance can be shared by every selection session.

Hierarchy queries are level-qualified: asking for the parent of ``chest`` as a
secondary node returns ``upper_body``, while asking for it as a tertiary node
returns None. Unknown ids never raise.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from selection_engine.core.exceptions import TaxonomyValidationError


class NodeLevel(str, Enum):
    """Level of a taxonomy node."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    CATEGORY = "category"


HIERARCHY_LEVELS: tuple[NodeLevel, ...] = (
    NodeLevel.PRIMARY,
    NodeLevel.SECONDARY,
    NodeLevel.TERTIARY,
)
CATEGORY_LEVELS: tuple[NodeLevel, ...] = (NodeLevel.CATEGORY,)


def coerce_level(level: NodeLevel | str | None) -> NodeLevel | None:
    """Resolve a level name to a NodeLevel, or None if it is not a known level."""
    if isinstance(level, NodeLevel):
        return level
    try:
        return NodeLevel(str(level))
    except ValueError:
        return None


@dataclass(frozen=True)
class TaxonomyNode:
    """A single static taxonomy node.

    Attributes:
        id: Key unique within its domain, used as the selection map key
        label: Display string
        level: Node level
        parent_id: Parent node id, present iff the node is below the top level
        child_ids: Ordered child ids, empty for leaves
        description: Optional longer description (category domains)
    """

    id: str
    label: str
    level: NodeLevel
    parent_id: str | None = None
    child_ids: tuple[str, ...] = ()
    description: str | None = None

    @property
    def is_leaf(self) -> bool:
        return not self.child_ids


class TaxonomyCatalog:
    """Immutable taxonomy with O(1) parent, children and descendant lookups.

    Example:
        >>> catalog = get_catalog(Domain.FOCUS_AREA)
        >>> catalog.get_parent("chest", "secondary")
        'upper_body'
        >>> catalog.get_children("chest", "secondary")
        ('upper_chest', 'lower_chest')
        >>> catalog.get_all_descendants("upper_body", "primary")[:3]
        ('chest', 'upper_chest', 'lower_chest')
    """

    def __init__(
        self,
        domain: str,
        nodes: Iterable[TaxonomyNode],
        levels: Sequence[NodeLevel] = HIERARCHY_LEVELS,
    ) -> None:
        """Build and validate the catalog.

        Args:
            domain: Domain name the taxonomy belongs to
            nodes: All taxonomy nodes, in display order
            levels: Levels from top to bottom

        Raises:
            TaxonomyValidationError: If the nodes do not form a valid forest
        """
        self._domain = str(domain)
        self._levels = tuple(levels)
        if not self._levels:
            raise TaxonomyValidationError(
                f"Taxonomy '{self._domain}' declares no levels",
                details={"domain": self._domain},
            )

        ordered: dict[str, TaxonomyNode] = {}
        for node in nodes:
            if node.id in ordered:
                raise TaxonomyValidationError(
                    f"Duplicate node id '{node.id}' in taxonomy '{self._domain}'",
                    details={"domain": self._domain, "node_id": node.id},
                )
            ordered[node.id] = node

        self._nodes = MappingProxyType(ordered)
        self._validate()

        self._descendants: dict[str, tuple[str, ...]] = {}
        for node_id in self._nodes:
            self._descendants[node_id] = tuple(self._walk_descendants(node_id))

        self._by_level: dict[NodeLevel, tuple[str, ...]] = {
            level: tuple(n.id for n in self._nodes.values() if n.level == level)
            for level in self._levels
        }

    @classmethod
    def from_nodes(
        cls,
        domain: str,
        nodes: Iterable[TaxonomyNode],
        levels: Sequence[NodeLevel] = HIERARCHY_LEVELS,
    ) -> TaxonomyCatalog:
        """Build a catalog from explicit nodes (synthetic taxonomies in tests)."""
        return cls(domain, nodes, levels)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        for node in self._nodes.values():
            if node.level not in self._levels:
                self._fail(f"Node '{node.id}' has level '{node.level.value}' not declared by the taxonomy", node)

            if node.parent_id is None:
                if node.level != self._levels[0]:
                    self._fail(f"Root node '{node.id}' must be at level '{self._levels[0].value}'", node)
            else:
                parent = self._nodes.get(node.parent_id)
                if parent is None:
                    self._fail(f"Node '{node.id}' references missing parent '{node.parent_id}'", node)
                if node.id not in parent.child_ids:
                    self._fail(f"Parent '{parent.id}' does not list child '{node.id}'", node)
                expected = self._next_level(parent.level)
                if node.level != expected:
                    self._fail(
                        f"Node '{node.id}' is at level '{node.level.value}' but its parent "
                        f"'{parent.id}' is at level '{parent.level.value}'",
                        node,
                    )

            for child_id in node.child_ids:
                child = self._nodes.get(child_id)
                if child is None:
                    self._fail(f"Node '{node.id}' lists missing child '{child_id}'", node)
                if child.parent_id != node.id:
                    self._fail(f"Child '{child_id}' does not point back to parent '{node.id}'", node)

            self._check_acyclic(node)

    def _check_acyclic(self, node: TaxonomyNode) -> None:
        seen = {node.id}
        current = node
        while current.parent_id is not None:
            if current.parent_id in seen:
                self._fail(f"Cycle detected through node '{current.parent_id}'", node)
            seen.add(current.parent_id)
            current = self._nodes[current.parent_id]

    def _next_level(self, level: NodeLevel) -> NodeLevel | None:
        index = self._levels.index(level)
        if index + 1 < len(self._levels):
            return self._levels[index + 1]
        return None

    def _fail(self, message: str, node: TaxonomyNode) -> None:
        raise TaxonomyValidationError(
            f"Taxonomy '{self._domain}': {message}",
            details={"domain": self._domain, "node_id": node.id},
        )

    def _walk_descendants(self, node_id: str) -> Iterator[str]:
        for child_id in self._nodes[node_id].child_ids:
            yield child_id
            yield from self._walk_descendants(child_id)

    # ------------------------------------------------------------------
    # Hierarchy queries
    # ------------------------------------------------------------------

    def _node_at(self, node_id: str, level: NodeLevel | str | None) -> TaxonomyNode | None:
        node = self._nodes.get(node_id)
        if node is None or node.level != coerce_level(level):
            return None
        return node

    def get_parent(self, node_id: str, level: NodeLevel | str) -> str | None:
        """Return the parent id of a node at the given level, or None."""
        node = self._node_at(node_id, level)
        return node.parent_id if node else None

    def get_children(self, node_id: str, level: NodeLevel | str) -> tuple[str, ...] | None:
        """Return the ordered child ids of a node at the given level.

        Returns None for leaves, unknown ids and level mismatches.
        """
        node = self._node_at(node_id, level)
        if node is None or node.is_leaf:
            return None
        return node.child_ids

    def get_all_descendants(self, node_id: str, level: NodeLevel | str) -> tuple[str, ...]:
        """Return every descendant id (children first, depth-first), or ()."""
        if self._node_at(node_id, level) is None:
            return ()
        return self._descendants[node_id]

    # ------------------------------------------------------------------
    # Node lookups
    # ------------------------------------------------------------------

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def levels(self) -> tuple[NodeLevel, ...]:
        return self._levels

    def get_node(self, node_id: str) -> TaxonomyNode | None:
        return self._nodes.get(node_id)

    def label_for(self, node_id: str) -> str:
        """Display label for a node, falling back to the id itself."""
        node = self._nodes.get(node_id)
        return node.label if node else node_id

    def level_of(self, node_id: str) -> NodeLevel | None:
        node = self._nodes.get(node_id)
        return node.level if node else None

    def ids_at_level(self, level: NodeLevel | str) -> tuple[str, ...]:
        resolved = coerce_level(level)
        if resolved is None:
            return ()
        return self._by_level.get(resolved, ())

    def roots(self) -> tuple[str, ...]:
        return self._by_level[self._levels[0]]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"TaxonomyCatalog(domain={self._domain!r}, nodes={len(self._nodes)})"
