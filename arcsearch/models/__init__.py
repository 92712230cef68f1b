"""
arcsearch/models/ -- Entity models and record validators.

Submodules:
    entities    Pydantic v2 models for items, hideout modules, projects, quests.
    validators  Non-raising validators and predicates over raw JSON records.
"""

from arcsearch.models.entities import (
    DatasetMetadata,
    HideoutModule,
    HideoutModuleLevel,
    Item,
    LocalizedString,
    Project,
    ProjectPhase,
    Quest,
    RequirementItem,
    text_of,
)
from arcsearch.models.validators import (
    ValidationResult,
    check_hideout_module,
    check_item,
    check_project,
    check_quest,
    is_valid_hideout_module,
    is_valid_item,
    is_valid_project,
    is_valid_quest,
)

__all__ = [
    "DatasetMetadata",
    "HideoutModule",
    "HideoutModuleLevel",
    "Item",
    "LocalizedString",
    "Project",
    "ProjectPhase",
    "Quest",
    "RequirementItem",
    "text_of",
    "ValidationResult",
    "check_hideout_module",
    "check_item",
    "check_project",
    "check_quest",
    "is_valid_hideout_module",
    "is_valid_item",
    "is_valid_project",
    "is_valid_quest",
]
