"""The user's in-progress build: category -> selected component(s)."""
from collections.abc import Mapping
from dataclasses import replace

from catalog.schema import (
    CATEGORIES,
    MULTI_SELECT_CATEGORIES,
    Component,
    component_from_record,
)

# Minimum number of filled categories before the insight panel is shown.
PANEL_MIN_CATEGORIES = 3


class BuildSelection(Mapping):
    """Mapping of category to the selected Component.

    Multi-select categories (RAM) map to a tuple of Components. Empty
    categories are absent from the mapping, so ``"cpu" in selection`` means a
    CPU has been picked.
    """

    def __init__(self, components=None):
        self._single = {}
        self._multi = {category: [] for category in MULTI_SELECT_CATEGORIES}
        for component in components or ():
            self.select(component)

    # -- Mapping protocol -------------------------------------------------
    def __getitem__(self, category):
        if category in MULTI_SELECT_CATEGORIES:
            kits = self._multi.get(category)
            if not kits:
                raise KeyError(category)
            return tuple(kits)
        return self._single[category]

    def __iter__(self):
        for category in CATEGORIES:
            if category in self._single or self._multi.get(category):
                yield category

    def __len__(self):
        return sum(1 for _ in self)

    def __repr__(self):
        return f"BuildSelection({self.to_ids()!r})"

    # -- Mutation ---------------------------------------------------------
    def select(self, component):
        if component.category not in CATEGORIES:
            raise ValueError(f"Unknown category {component.category!r}")
        if component.category in MULTI_SELECT_CATEGORIES:
            self._multi[component.category].append(component)
        else:
            self._single[component.category] = component
        return self

    def remove(self, category, component_id=None):
        """Drop a category, or a single kit from a multi-select category."""
        if category in MULTI_SELECT_CATEGORIES:
            kits = self._multi.get(category, [])
            if component_id is None:
                kits.clear()
                return self
            for index, kit in enumerate(kits):
                if kit.id == str(component_id):
                    del kits[index]
                    break
            return self
        self._single.pop(category, None)
        return self

    def clear(self):
        self._single.clear()
        for kits in self._multi.values():
            kits.clear()
        return self

    # -- Queries ----------------------------------------------------------
    def single(self, category):
        """The one component in ``category`` (first kit for RAM) or None."""
        if category in MULTI_SELECT_CATEGORIES:
            kits = self._multi.get(category)
            return kits[0] if kits else None
        return self._single.get(category)

    def all_of(self, category):
        if category in MULTI_SELECT_CATEGORIES:
            return tuple(self._multi.get(category, ()))
        component = self._single.get(category)
        return (component,) if component else ()

    def components(self):
        for category in self:
            yield from self.all_of(category)

    def total_price(self):
        return round(sum(c.price or 0 for c in self.components()), 2)

    def to_ids(self):
        ids = {}
        for category in self:
            if category in MULTI_SELECT_CATEGORIES:
                ids[category] = [c.id for c in self.all_of(category)]
            else:
                ids[category] = self._single[category].id
        return ids

    @classmethod
    def from_ids(cls, ids, fetch):
        """Rebuild a selection from an id mapping.

        ``fetch(category, ids)`` returns Components for the given ids; ids
        that no longer resolve are dropped silently.
        """
        selection = cls()
        for category in CATEGORIES:
            value = (ids or {}).get(category)
            if value in (None, "", []):
                continue
            wanted = value if isinstance(value, (list, tuple)) else [value]
            for component in fetch(category, wanted):
                selection.select(component)
        return selection


def as_selection(value):
    """Accept a BuildSelection or a plain ``{category: component}`` dict."""
    if isinstance(value, BuildSelection):
        return value
    selection = BuildSelection()
    for category, item in (value or {}).items():
        if category not in CATEGORIES:
            continue
        items = item if isinstance(item, (list, tuple)) else [item]
        for index, component in enumerate(items):
            if isinstance(component, Mapping):
                # Raw catalog record; give it a stable id if it has none.
                fallback_id = component.get("id") or f"{category}-{index}"
                component = component_from_record(
                    category, component, component_id=fallback_id
                )
            if isinstance(component, Component):
                if component.category != category:
                    component = replace(component, category=category)
                selection.select(component)
    return selection


def filled_categories(selection):
    return len(as_selection(selection))


def should_show_insights(selection, minimum=PANEL_MIN_CATEGORIES):
    return filled_categories(selection) >= minimum
