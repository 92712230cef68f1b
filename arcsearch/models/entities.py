"""
arcsearch/models/entities.py -- Pydantic v2 models for the game dataset.

The upstream dataset is loosely structured: many fields are optional,
some are missing on a large share of records, and a few change shape
between records.  The models therefore

    - validate only what the core depends on, with strict scalar types
      (no coercion: ``"5"`` is not a number, ``True`` is not a number);
    - accept ``None`` or absence for every optional field, but reject
      an optional field that is present with the wrong type;
    - keep unknown fields (``extra='allow'``) so schema additions upstream
      never break loading;
    - are frozen, because validated collections are shared read-only by
      the reference indexer and the search engine.

Attributes are snake_case; the JSON keys are camelCase aliases.  Input is
always read by alias, so a snake_case key such as ``stack_size`` is just
an unknown extra field and never stands in for ``stackSize``.
"""

from __future__ import annotations

from typing import Any, Optional, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

Number: TypeAlias = Union[StrictInt, StrictFloat]
"""A JSON number.  Booleans are rejected."""


class _Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
    )


class LocalizedString(_Entity):
    """Display text keyed by language code.  English is mandatory."""

    en: StrictStr

    @property
    def text(self) -> str:
        return self.en

    def get(self, language: str, fallback: bool = True) -> str | None:
        """Return the text for *language*, falling back to English."""
        if language == "en":
            return self.en
        value = (self.model_extra or {}).get(language)
        if isinstance(value, str):
            return value
        return self.en if fallback else None


def text_of(value: str | LocalizedString | None) -> str:
    """Normalize a ``str | LocalizedString`` field to plain text."""
    if value is None:
        return ""
    if isinstance(value, LocalizedString):
        return value.en
    return value


class RequirementItem(_Entity):
    """A reference to an item and how many units are needed."""

    item_id: StrictStr = Field(min_length=1)
    quantity: Number


class Item(_Entity):
    id: StrictStr
    name: LocalizedString
    type: StrictStr
    description: Optional[LocalizedString] = None
    rarity: Optional[StrictStr] = None
    value: Optional[Number] = None
    weight_kg: Optional[Number] = None
    stack_size: Optional[Number] = None
    image_filename: Optional[StrictStr] = None
    updated_at: Optional[StrictStr] = None
    recycles_into: Optional[dict[str, Number]] = None
    salvages_into: Optional[dict[str, Number]] = None
    recipe: Optional[dict[str, Number]] = None
    effects: Optional[dict[str, Any]] = None
    # Shape varies upstream; carried through unchecked.
    found_in: Any = None
    craft_bench: Any = None

    @property
    def display_name(self) -> str:
        return self.name.en


class HideoutModuleLevel(_Entity):
    level: Number
    requirement_item_ids: list[RequirementItem]
    other_requirements: Optional[list[StrictStr]] = None


class HideoutModule(_Entity):
    id: StrictStr
    name: LocalizedString
    max_level: Number
    levels: list[HideoutModuleLevel]

    @property
    def display_name(self) -> str:
        return self.name.en


class ProjectPhase(_Entity):
    phase: Number
    # Plain string in some records, LocalizedString in others.
    name: Union[StrictStr, LocalizedString]
    description: Optional[StrictStr] = None
    requirement_item_ids: list[RequirementItem]
    requirement_categories: Optional[list[Any]] = None

    @property
    def display_name(self) -> str:
        return text_of(self.name)


class Project(_Entity):
    id: StrictStr
    name: LocalizedString
    description: LocalizedString
    phases: list[ProjectPhase]

    @property
    def display_name(self) -> str:
        return self.name.en


class Quest(_Entity):
    """A quest.  ``previous_quest_ids``/``next_quest_ids`` may form cycles."""

    id: StrictStr
    name: LocalizedString
    description: Optional[LocalizedString] = None
    trader: StrictStr
    objectives: list[LocalizedString]
    xp: Number
    previous_quest_ids: list[StrictStr]
    next_quest_ids: list[StrictStr]
    required_item_ids: Optional[list[RequirementItem]] = None
    reward_item_ids: Optional[list[RequirementItem]] = None
    updated_at: Optional[StrictStr] = None

    @property
    def display_name(self) -> str:
        return self.name.en


class DatasetMetadata(_Entity):
    """The aggregation step's ``metadata.json`` record."""

    last_updated: StrictStr
    counts: dict[str, Number] = Field(default_factory=dict)
