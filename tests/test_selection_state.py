"""Tests for selection toggling, cascade removal and category ratings."""
import pytest

from selection_engine.selection import (
    CategoryRatingManager,
    SelectionEntry,
    SelectionStateManager,
    selection_to_wire,
)


@pytest.fixture
def manager(synthetic_catalog):
    return SelectionStateManager(synthetic_catalog)


def toggle_all(manager, *steps):
    selection = {}
    for node_id, level in steps:
        selection = manager.toggle(selection, node_id, level).selection
    return selection


class TestToggleAdd:
    """Test adding nodes to a selection."""

    def test_add_snapshots_catalog(self, manager):
        """Test an added entry carries label, level, parent and children."""
        result = manager.toggle({}, "S1", "secondary")

        assert result.added is True
        entry = result.selection["S1"]
        assert entry.selected is True
        assert entry.label == "Secondary 1"
        assert entry.level == "secondary"
        assert entry.parent_key == "P"
        assert entry.children == ("T1", "T2")
        assert result.expand == ("T1", "T2")

    def test_add_leaf(self, manager):
        """Test a leaf has no children and nothing to expand."""
        result = manager.toggle({}, "T1", "tertiary")
        assert result.selection["T1"].children is None
        assert result.expand == ()

    def test_add_does_not_require_parent(self, manager):
        """Test a child can be selected without its parent."""
        result = manager.toggle({}, "T2", "tertiary")
        assert set(result.selection) == {"T2"}
        assert result.selection["T2"].parent_key == "S1"

    def test_unknown_id(self, manager):
        """Test unknown ids are stored with the id as label."""
        result = manager.toggle({}, "mystery", "secondary")
        entry = result.selection["mystery"]
        assert entry.label == "mystery"
        assert entry.parent_key is None
        assert entry.children is None

    def test_input_not_mutated(self, manager):
        """Test toggling returns a new map and leaves the input alone."""
        original = {}
        result = manager.toggle(original, "P", "primary")
        assert original == {}
        assert result.selection is not original


class TestToggleRemove:
    """Test cascade removal."""

    def test_cascade_removes_descendants(self, manager):
        """Test removing P drops S1, S2, T1 and T2 but keeps Q."""
        selection = toggle_all(
            manager,
            ("P", "primary"),
            ("S1", "secondary"),
            ("T1", "tertiary"),
            ("S2", "secondary"),
            ("Q", "primary"),
        )

        result = manager.toggle(selection, "P", "primary")

        assert result.added is False
        assert set(result.selection) == {"Q"}
        assert result.removed == ("P", "S1", "T1", "S2")

    def test_cascade_from_secondary(self, manager):
        """Test removing S1 drops only its own subtree."""
        selection = toggle_all(
            manager,
            ("P", "primary"),
            ("S1", "secondary"),
            ("T1", "tertiary"),
            ("T2", "tertiary"),
        )

        result = manager.toggle(selection, "S1", "secondary")

        assert set(result.selection) == {"P"}
        assert result.removed == ("S1", "T1", "T2")

    def test_removing_leaf(self, manager):
        """Test removing a leaf leaves its parent selected."""
        selection = toggle_all(manager, ("S1", "secondary"), ("T1", "tertiary"))
        result = manager.toggle(selection, "T1", "tertiary")
        assert set(result.selection) == {"S1"}

    def test_toggle_twice_restores(self, manager):
        """Test add then remove returns to the starting selection."""
        start = toggle_all(manager, ("Q", "primary"))
        added = manager.toggle(start, "T1", "tertiary").selection
        assert manager.toggle(added, "T1", "tertiary").selection == start

    def test_unselected_entry_is_added_again(self, manager):
        """Test an entry with selected=False toggles back on."""
        selection = {"P": SelectionEntry(selected=False, label="Primary", level="primary")}
        result = manager.toggle(selection, "P", "primary")
        assert result.added is True
        assert result.selection["P"].selected is True


class TestFocusAreaToggle:
    """Test toggling against the packaged focus taxonomy."""

    def test_expand_region(self, focus_catalog):
        """Test selecting a region proposes its muscle groups."""
        manager = SelectionStateManager(focus_catalog)
        result = manager.toggle({}, "upper_body", "primary")
        assert result.expand == ("chest", "back", "shoulders", "biceps", "triceps")

    def test_wire_form(self, focus_catalog):
        """Test the wire form uses camelCase and omits unset fields."""
        manager = SelectionStateManager(focus_catalog)
        selection = manager.toggle({}, "chest", "secondary").selection
        assert selection_to_wire(selection) == {
            "chest": {
                "selected": True,
                "label": "Chest",
                "level": "secondary",
                "parentKey": "upper_body",
                "children": ["upper_chest", "lower_chest"],
            }
        }


class TestCategoryRatingManager:
    """Test category presence and ratings."""

    def test_toggle_category(self, stress_catalog):
        """Test toggling adds a category entry with its description."""
        manager = CategoryRatingManager(stress_catalog)
        result = manager.toggle_category({}, "physical")

        entry = result.selection["physical"]
        assert result.added is True
        assert entry.level == "category"
        assert entry.label == "Physical"
        assert entry.description
        assert entry.rating is None

    def test_toggle_category_off(self, soreness_catalog):
        """Test toggling a present category removes it."""
        manager = CategoryRatingManager(soreness_catalog)
        selection = manager.toggle_category({}, "neck").selection
        result = manager.toggle_category(selection, "neck")
        assert result.added is False
        assert result.selection == {}
        assert result.removed == ("neck",)

    def test_set_rating(self, soreness_catalog):
        """Test rating an existing category replaces only the rating."""
        manager = CategoryRatingManager(soreness_catalog)
        selection = manager.toggle_category({}, "neck").selection

        rated = manager.set_rating(selection, "neck", 4)

        assert rated["neck"].rating == 4
        assert rated["neck"].label == "Neck"
        assert selection["neck"].rating is None

    def test_set_rating_absent_category_is_noop(self, soreness_catalog):
        """Test rating an unselected category changes nothing."""
        manager = CategoryRatingManager(soreness_catalog)
        selection = manager.toggle_category({}, "neck").selection

        result = manager.set_rating(selection, "knees", 3)

        assert result == selection
        assert "knees" not in result
