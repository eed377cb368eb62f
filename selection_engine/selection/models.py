"""Selection entry model shared by the state manager, normalizer and flatteners."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SelectionEntry(BaseModel):
    """One currently-selected node.

    ``parent_key`` and ``children`` are snapshots of the taxonomy at selection
    time, not existence constraints: the parent may itself be unselected.
    ``rating`` is only used by category + rating domains and is kept as given;
    only whole ratings on the 1-5 scale map to a level.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    selected: bool = True
    label: str = ""
    level: str | None = None
    rating: int | float | None = None
    parent_key: str | None = Field(default=None, alias="parentKey")
    children: tuple[str, ...] | None = None
    description: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase aliases, leaving out unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Sparse selection map keyed by node id
Selection = dict[str, SelectionEntry]


def selection_to_wire(selection: Selection) -> dict[str, dict[str, Any]]:
    return {key: entry.to_wire() for key, entry in selection.items()}
