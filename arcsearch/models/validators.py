"""
arcsearch/models/validators.py -- Record validators for each entity kind.

Each validator takes an arbitrary decoded JSON value and never raises:

    check_item(value)    -> ValidationResult  (passed, errors, entity)
    is_valid_item(value) -> bool

``check_*`` returns the typed entity on success and human-readable
reasons on failure, so the loader can log *why* a record was skipped.
``is_valid_*`` is the plain predicate form.

Usage::

    from arcsearch.models.validators import check_item

    result = check_item(raw)
    if result.passed:
        item = result.entity
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from arcsearch.models.entities import (
    HideoutModule,
    Item,
    LocalizedString,
    Project,
    Quest,
    RequirementItem,
)


# ------------------------------------------------------------------
# Validation result
# ------------------------------------------------------------------

class ValidationResult:
    """Result of validating one raw record.

    Attributes
    ----------
    passed : bool
        Whether validation succeeded.
    errors : list[str]
        Human-readable error messages (empty if passed).
    entity : BaseModel | None
        The validated entity instance (only set if passed).
    """

    __slots__ = ("passed", "errors", "entity")

    def __init__(
        self,
        passed: bool,
        errors: list[str],
        entity: BaseModel | None,
    ):
        self.passed = passed
        self.errors = errors
        self.entity = entity

    def __bool__(self) -> bool:
        return self.passed

    def __repr__(self) -> str:
        if self.passed:
            return f"ValidationResult(passed=True, entity={type(self.entity).__name__})"
        return f"ValidationResult(passed=False, errors={self.errors!r})"

    @property
    def reason(self) -> str:
        """All error messages joined into one line."""
        return "; ".join(self.errors)


# ------------------------------------------------------------------
# Core
# ------------------------------------------------------------------

def check_entity(model: type[BaseModel], value: Any) -> ValidationResult:
    """Validate *value* against *model* without raising."""
    if not isinstance(value, dict):
        return ValidationResult(
            passed=False,
            errors=[f"Expected an object, got {_json_type_name(value)}."],
            entity=None,
        )
    try:
        entity = model.model_validate(value)
    except ValidationError as exc:
        errors = [_humanize_pydantic_error(err, value) for err in exc.errors()]
        return ValidationResult(passed=False, errors=errors, entity=None)
    return ValidationResult(passed=True, errors=[], entity=entity)


def check_item(value: Any) -> ValidationResult:
    return check_entity(Item, value)


def check_hideout_module(value: Any) -> ValidationResult:
    return check_entity(HideoutModule, value)


def check_project(value: Any) -> ValidationResult:
    return check_entity(Project, value)


def check_quest(value: Any) -> ValidationResult:
    return check_entity(Quest, value)


# ------------------------------------------------------------------
# Predicates
# ------------------------------------------------------------------

def is_localized_string(value: Any) -> bool:
    return check_entity(LocalizedString, value).passed


def is_requirement_item(value: Any) -> bool:
    return check_entity(RequirementItem, value).passed


def is_valid_item(value: Any) -> bool:
    return check_item(value).passed


def is_valid_hideout_module(value: Any) -> bool:
    return check_hideout_module(value).passed


def is_valid_project(value: Any) -> bool:
    return check_project(value).passed


def is_valid_quest(value: Any) -> bool:
    return check_quest(value).passed


# ------------------------------------------------------------------
# Error humanization
# ------------------------------------------------------------------

def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _humanize_pydantic_error(err: dict, record: dict) -> str:
    """Convert a single Pydantic error dict to a short message.

    Pydantic error dicts look like::

        {
            "type": "string_type",
            "loc": ("name", "en"),
            "msg": "Input should be a valid string",
            "input": 42,
        }

    Union members add their own location segments (``str``,
    ``LocalizedString``, ``int``); those are dropped from the path.
    """
    loc = err.get("loc", ())
    msg = err.get("msg", "Validation error")
    err_type = err.get("type", "")

    field_path = ".".join(
        str(part) for part in loc if not _is_union_tag(part)
    ) or "(root)"

    record_id = record.get("id")
    subject = f"'{record_id}'" if isinstance(record_id, str) else "record"

    if err_type == "missing":
        return f"{subject}: required field '{field_path}' is missing"
    if "type" in err_type:
        return (
            f"{subject}: field '{field_path}' has the wrong type "
            f"(got {_json_type_name(err.get('input'))}). {msg}"
        )
    return f"{subject}: field '{field_path}': {msg}"


_UNION_TAGS = frozenset({"str", "int", "float", "LocalizedString"})


def _is_union_tag(part: Any) -> bool:
    return isinstance(part, str) and part in _UNION_TAGS
