"""
Shared pytest fixtures for the arcsearch test suite.

Provides:
    - raw_items / raw_modules / raw_projects / raw_quests: decoded JSON
      documents shaped like the upstream dataset
    - dataset: the same documents, validated
    - data_dir: a temporary directory holding the four documents as files
    - FakeTransport: a scripted transport for loader and retry tests
"""

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arcsearch.errors import HTTPStatusError  # noqa: E402
from arcsearch.loader import Dataset, validate_collection  # noqa: E402


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------

class FakeTransport:
    """Serves scripted responses keyed by the file name at the end of a location.

    ``script`` maps a file name to a list of steps.  Each call consumes
    one step; the last step repeats forever.  A step is an exception
    instance (raised), an ``int`` status code (raised as
    ``HTTPStatusError``), or anything else (returned as the document).
    Unscripted names answer 404.
    """

    def __init__(self, script=None):
        self.script = {name: list(steps) for name, steps in (script or {}).items()}
        self.calls: list[str] = []

    async def get_json(self, location):
        self.calls.append(location)
        name = location.replace("\\", "/").rsplit("/", 1)[-1]
        steps = self.script.get(name)
        if not steps:
            raise HTTPStatusError(location, 404, "Not Found")
        step = steps.pop(0) if len(steps) > 1 else steps[0]
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, int) and not isinstance(step, bool):
            raise HTTPStatusError(location, step, "scripted")
        return step

    def calls_for(self, name):
        return [c for c in self.calls if c.endswith(name)]


@pytest.fixture
def make_transport():
    """Factory fixture: ``make_transport({"items.json": [503, doc]})``."""
    return FakeTransport


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------

@pytest.fixture
def raw_items():
    return [
        {
            "id": "scrap",
            "name": {"en": "Scrap Metal", "de": "Altmetall"},
            "description": {"en": "Twisted pieces of salvaged metal."},
            "type": "Material",
            "rarity": "Common",
            "value": 10,
            "weightKg": 0.5,
            "stackSize": 50,
            "imageFilename": "scrap.png",
        },
        {
            "id": "wires",
            "name": {"en": "Wires"},
            "description": {"en": "A bundle of copper wires."},
            "type": "Material",
            "rarity": "Uncommon",
        },
        {
            "id": "battery",
            "name": {"en": "Battery"},
            "type": "Component",
            "rarity": "Rare",
            "recyclesInto": {"wires": 2},
        },
        {
            "id": "med-kit",
            "name": {"en": "Medical Kit"},
            "description": {"en": "Restores a large amount of health."},
            "type": "Consumable",
        },
        {
            "id": "rusted-gear",
            "name": {"en": "Rusted Gear"},
            "type": "Material",
            "rarity": "Common",
        },
    ]


@pytest.fixture
def raw_modules():
    return [
        {
            "id": "workbench",
            "name": {"en": "Workbench"},
            "maxLevel": 2,
            "levels": [
                {
                    "level": 1,
                    "requirementItemIds": [{"itemId": "scrap", "quantity": 5}],
                },
                {
                    "level": 2,
                    "requirementItemIds": [
                        {"itemId": "scrap", "quantity": 10},
                        {"itemId": "wires", "quantity": 3},
                    ],
                    "otherRequirements": ["Reach level 10"],
                },
            ],
        },
    ]


@pytest.fixture
def raw_projects():
    return [
        {
            "id": "radio-tower",
            "name": {"en": "Radio Tower"},
            "description": {"en": "Restore long range communication."},
            "phases": [
                {
                    "phase": 1,
                    "name": "Foundation",
                    "requirementItemIds": [{"itemId": "scrap", "quantity": 20}],
                },
                {
                    "phase": 2,
                    "name": {"en": "Antenna Array"},
                    "requirementItemIds": [{"itemId": "battery", "quantity": 2}],
                },
            ],
        },
    ]


@pytest.fixture
def raw_quests():
    return [
        {
            "id": "first-aid",
            "name": {"en": "First Aid"},
            "description": {"en": "Bring medical supplies."},
            "trader": "Lance",
            "objectives": [{"en": "Deliver a Medical Kit"}],
            "xp": 500,
            "previousQuestIds": [],
            "nextQuestIds": ["supply-run"],
            "requiredItemIds": [{"itemId": "med-kit", "quantity": 1}],
            "rewardItemIds": [{"itemId": "battery", "quantity": 1}],
        },
        {
            "id": "supply-run",
            "name": {"en": "Supply Run"},
            "trader": "Shani",
            "objectives": [{"en": "Explore the dam"}],
            "xp": 750,
            "previousQuestIds": ["first-aid"],
            "nextQuestIds": [],
        },
    ]


@pytest.fixture
def dataset(raw_items, raw_modules, raw_projects, raw_quests):
    return Dataset(
        items=validate_collection(raw_items, "items"),
        hideout_modules=validate_collection(raw_modules, "hideoutModules"),
        projects=validate_collection(raw_projects, "projects"),
        quests=validate_collection(raw_quests, "quests"),
    )


@pytest.fixture
def data_dir(tmp_path, raw_items, raw_modules, raw_projects, raw_quests):
    """A directory with the four documents plus metadata, as the aggregator writes them."""
    root = tmp_path / "data"
    root.mkdir()
    documents = {
        "items.json": raw_items,
        "hideoutModules.json": raw_modules,
        # projects.json is written as a single object by some upstream versions
        "projects.json": raw_projects[0],
        "quests.json": raw_quests,
        "metadata.json": [
            {
                "lastUpdated": "2025-11-02T10:00:00.000Z",
                "counts": {"items": 5, "hideoutModules": 1, "quests": 2, "projects": 1},
            }
        ],
    }
    for name, doc in documents.items():
        with open(root / name, "w", encoding="utf-8") as fh:
            json.dump(doc, fh, indent=2)
    return root
