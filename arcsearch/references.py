"""
arcsearch/references.py -- Which structures need which items.

``build_reference_count`` walks every requirement of every hideout module
level, project phase and quest, and aggregates them per item id.  Each
requirement is attributed to a source label:

    "<module name> (Level <n>)"
    "<project name> (<phase name>)"
    "<quest name> (Quest)"

Modules are walked first, then projects, then quests, each in input
order, and ``sources`` keeps that order.  Items nobody requires are
absent from the result.

The module also carries the small derived views the presentation layer
asks for: reference counts per item and the distinct filter options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from arcsearch.models.entities import HideoutModule, Item, Project, Quest, RequirementItem


@dataclass
class ReferenceDetails:
    """Aggregated references to one item."""
    count: int = 0
    sources: list[str] = field(default_factory=list)
    total_quantity: float = 0
    quantity_by_source: dict[str, float] = field(default_factory=dict)

    def add(self, source: str, quantity: float) -> None:
        self.count += 1
        self.sources.append(source)
        self.total_quantity += quantity
        self.quantity_by_source[source] = self.quantity_by_source.get(source, 0) + quantity

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys the presentation layer uses."""
        return {
            "count": self.count,
            "sources": list(self.sources),
            "totalQuantity": self.total_quantity,
            "quantityBySource": dict(self.quantity_by_source),
        }


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _record(
    reference_map: dict[str, ReferenceDetails],
    requirements: Iterable[RequirementItem],
    source: str,
) -> None:
    for requirement in requirements:
        details = reference_map.get(requirement.item_id)
        if details is None:
            details = reference_map[requirement.item_id] = ReferenceDetails()
        details.add(source, requirement.quantity)


def build_reference_count(
    hideout_modules: Sequence[HideoutModule],
    projects: Sequence[Project],
    quests: Sequence[Quest] = (),
) -> dict[str, ReferenceDetails]:
    """Map each referenced item id to its aggregated ``ReferenceDetails``.

    Pure: a fresh mapping is built on every call.

    Parameters
    ----------
    hideout_modules : sequence of HideoutModule
    projects : sequence of Project
    quests : sequence of Quest, optional
        Only quests with ``required_item_ids`` contribute.

    Returns
    -------
    dict[str, ReferenceDetails]
        Keyed by item id, in first-reference order.
    """
    reference_map: dict[str, ReferenceDetails] = {}

    for module in hideout_modules:
        for level in module.levels:
            source = f"{module.name.en} (Level {_format_number(level.level)})"
            _record(reference_map, level.requirement_item_ids, source)

    for project in projects:
        for phase in project.phases:
            source = f"{project.name.en} ({phase.display_name})"
            _record(reference_map, phase.requirement_item_ids, source)

    for quest in quests:
        if not quest.required_item_ids:
            continue
        _record(reference_map, quest.required_item_ids, f"{quest.name.en} (Quest)")

    return reference_map


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ItemWithCount:
    item: Item
    reference_count: int


@dataclass(frozen=True)
class FilterOptions:
    rarities: list[str]
    types: list[str]


def items_with_reference_counts(
    items: Iterable[Item],
    reference_map: dict[str, ReferenceDetails],
) -> list[ItemWithCount]:
    """Pair every item with how many structures reference it (0 if none)."""
    counts = []
    for item in items:
        details = reference_map.get(item.id)
        counts.append(ItemWithCount(item=item, reference_count=details.count if details else 0))
    return counts


def build_filter_options(items: Iterable[Item]) -> FilterOptions:
    """Return the sorted distinct rarities and types present in *items*."""
    rarities: set[str] = set()
    types: set[str] = set()
    for item in items:
        types.add(item.type)
        if item.rarity:
            rarities.add(item.rarity)
    return FilterOptions(rarities=sorted(rarities), types=sorted(types))


def filter_items_by_attributes(
    items: Iterable[Item],
    rarities: Iterable[str] = (),
    types: Iterable[str] = (),
) -> list[Item]:
    """Keep items whose rarity and type are selected.

    An empty selection for either attribute means "no filter" on it.
    Items without a rarity are dropped whenever a rarity filter is active.
    """
    wanted_rarities = set(rarities)
    wanted_types = set(types)
    kept = []
    for item in items:
        if wanted_rarities and item.rarity not in wanted_rarities:
            continue
        if wanted_types and item.type not in wanted_types:
            continue
        kept.append(item)
    return kept
