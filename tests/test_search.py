"""
Tests for arcsearch/search.py -- fuzzy scoring, the index, and item search.

Covers:
    - Empty queries returning everything in order
    - Exact, substring and misspelled matches
    - Description matching
    - Source matching through modules, projects, phases and quests
    - Ordering and de-duplication of combined results
    - Index reuse keyed on collection identity
"""

import pytest

from arcsearch.models import HideoutModule
from arcsearch.search import (
    DEFAULT_THRESHOLD,
    FuzzyIndex,
    SearchEngine,
    filter_items_by_name,
    find_items_required_by_source,
    fuzzy_score,
    substring_edit_distance,
)


def _ids(items):
    return [item.id for item in items]


def _module(name, item_ids, module_id="extra"):
    return HideoutModule.model_validate({
        "id": module_id,
        "name": {"en": name},
        "maxLevel": 1,
        "levels": [{
            "level": 1,
            "requirementItemIds": [{"itemId": i, "quantity": 1} for i in item_ids],
        }],
    })


@pytest.fixture
def engine():
    return SearchEngine()


def _search(engine, dataset, query, modules=None):
    return engine.filter_items_by_name(
        dataset.items,
        query,
        dataset.hideout_modules if modules is None else modules,
        dataset.projects,
        dataset.quests,
    )


# ======================================================================
# Scoring
# ======================================================================


class TestFuzzyScore:
    def test_exact_match_scores_zero(self):
        assert fuzzy_score("Scrap Metal", "scrap  metal") == 0.0

    def test_substring_scores_low(self):
        score = fuzzy_score("scrap", "Scrap Metal")
        assert 0.0 < score < 0.1

    def test_longer_substring_scores_lower(self):
        assert fuzzy_score("scrap meta", "Scrap Metal") < fuzzy_score("scrap", "Scrap Metal")

    def test_typo_within_threshold(self):
        assert fuzzy_score("wrkbench", "Workbench") <= DEFAULT_THRESHOLD

    def test_unrelated_text_above_threshold(self):
        assert fuzzy_score("battery", "Workbench") > DEFAULT_THRESHOLD

    @pytest.mark.parametrize("query, text", [
        ("", "anything"),
        ("   ", "anything"),
        ("anything", ""),
    ])
    def test_empty_inputs_never_match(self, query, text):
        assert fuzzy_score(query, text) == 1.0

    @pytest.mark.parametrize("query, text", [
        ("key", "Battery"),
        ("key", "Workbench"),
        ("Medical", "Scrap Metal"),
        ("Medical", "Twisted pieces of salvaged metal."),
    ])
    def test_scattered_letters_do_not_match(self, query, text):
        assert fuzzy_score(query, text) > DEFAULT_THRESHOLD

    def test_score_is_edits_over_query_length(self):
        assert fuzzy_score("wrkbench", "Workbench") == pytest.approx(1 / 8)
        assert fuzzy_score("Scrap Metl", "Scrap Metal") == pytest.approx(1 / 10)

    @pytest.mark.parametrize("query", ["a", "zzzz", "scrap metal and more", "Metal Scrap"])
    def test_bounded(self, query):
        assert 0.0 <= fuzzy_score(query, "Scrap Metal") <= 1.0


class TestFuzzyIndex:
    def test_best_first_then_input_order(self, dataset):
        index = FuzzyIndex(dataset.items, [lambda item: item.name.en])
        hits = index.search("Metal")
        assert [hit.record.id for hit in hits] == ["scrap"]
        assert hits[0].index == 0

    def test_records_without_keys_skipped(self, dataset):
        index = FuzzyIndex(dataset.items, [lambda item: None])
        assert len(index) == 5
        assert index.search("Scrap") == []

    def test_blank_query(self, dataset):
        assert FuzzyIndex(dataset.items, [lambda item: item.name.en]).search("  ") == []


# ======================================================================
# filter_items_by_name
# ======================================================================


class TestFilterItemsByName:
    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_blank_query_returns_all_items_in_order(self, engine, dataset, query):
        result = _search(engine, dataset, query)
        assert result == list(dataset.items)

    def test_exact_name_first(self, engine, dataset):
        assert _ids(_search(engine, dataset, "Wires"))[0] == "wires"

    def test_case_insensitive(self, engine, dataset):
        assert _ids(_search(engine, dataset, "BATTERY")) == ["battery"]

    def test_misspelled_name(self, engine, dataset):
        assert _ids(_search(engine, dataset, "Scrap Metl"))[0] == "scrap"

    def test_description_match(self, engine, dataset):
        assert "wires" in _ids(_search(engine, dataset, "copper"))

    def test_misspelled_module_name_finds_required_items(self, engine, dataset):
        assert _ids(_search(engine, dataset, "wrkbench")) == ["scrap", "wires"]

    def test_phase_name_finds_phase_items_only(self, engine, dataset):
        assert _ids(_search(engine, dataset, "Antenna")) == ["battery"]

    def test_project_name_finds_all_phase_items(self, engine, dataset):
        assert set(_ids(_search(engine, dataset, "Radio Tower"))) == {"scrap", "battery"}

    def test_quest_name_finds_required_not_reward_items(self, engine, dataset):
        ids = _ids(_search(engine, dataset, "First Aid"))
        assert "med-kit" in ids
        assert "battery" not in ids

    def test_source_only_items_follow_direct_hits(self, engine, dataset):
        modules = dataset.hideout_modules + (_module("Medical Station", ["wires"]),)
        assert _ids(_search(engine, dataset, "Medical", modules)) == ["med-kit", "wires"]

    def test_no_duplicates(self, engine, dataset):
        modules = dataset.hideout_modules + (_module("Scrap Yard", ["scrap", "rusted-gear"]),)
        ids = _ids(_search(engine, dataset, "Scrap", modules))
        assert ids[0] == "scrap"
        assert ids.count("scrap") == 1
        assert "rusted-gear" in ids

    def test_without_sources_only_direct_matches(self, engine, dataset):
        assert engine.filter_items_by_name(dataset.items, "wrkbench") == []
        assert engine.filter_items_by_name(
            dataset.items, "wrkbench", dataset.hideout_modules, dataset.projects, None,
        ) == []

    def test_no_match(self, engine, dataset):
        assert _search(engine, dataset, "xylophone") == []

    def test_threshold_is_configurable(self, dataset):
        strict = SearchEngine(threshold=0.0)
        assert _search(strict, dataset, "Scrap Metl") == []
        assert _ids(_search(strict, dataset, "scrap metal")) == ["scrap"]

    def test_module_level_function(self, dataset):
        result = filter_items_by_name(
            dataset.items, "wrkbench", dataset.hideout_modules, dataset.projects, dataset.quests,
        )
        assert _ids(result) == ["scrap", "wires"]


class TestFindItemsRequiredBySource:
    def test_module(self, engine, dataset):
        ids = engine.find_items_required_by_source(
            dataset.hideout_modules, dataset.projects, dataset.quests, "Workbench",
        )
        assert ids == {"scrap", "wires"}

    def test_blank_query(self, engine, dataset):
        assert engine.find_items_required_by_source(
            dataset.hideout_modules, dataset.projects, dataset.quests, " ",
        ) == set()

    def test_quest_without_requirements(self, engine, dataset):
        assert engine.find_items_required_by_source(
            dataset.hideout_modules, dataset.projects, dataset.quests, "Supply Run",
        ) == set()

    def test_module_level_function(self, dataset):
        assert find_items_required_by_source(
            dataset.hideout_modules, dataset.projects, dataset.quests, "Antenna Array",
        ) == {"battery"}


# ======================================================================
# Index memoization
# ======================================================================


class TestIndexReuse:
    def test_same_collections_reuse_indexes(self, engine, dataset):
        _search(engine, dataset, "scrap")
        builds = engine.indexes.builds
        _search(engine, dataset, "wires")
        _search(engine, dataset, "battery")
        assert engine.indexes.builds == builds

    def test_new_collection_object_rebuilds(self, engine, dataset):
        _search(engine, dataset, "scrap")
        builds = engine.indexes.builds
        engine.filter_items_by_name(list(dataset.items), "scrap")
        assert engine.indexes.builds == builds + 1

    def test_equal_but_distinct_collection_rebuilds(self, engine, dataset):
        items = list(dataset.items)
        engine.search_items(items, "scrap")
        copy = list(dataset.items)
        assert copy == items
        engine.search_items(copy, "scrap")
        assert engine.indexes.builds == 2

    def test_rebuilt_index_sees_new_records(self, engine, dataset):
        assert engine.filter_items_by_name(dataset.items[:1], "Battery") == []
        assert _ids(engine.filter_items_by_name(dataset.items, "Battery")) == ["battery"]

    def test_blank_query_builds_nothing(self, engine, dataset):
        _search(engine, dataset, "")
        assert engine.indexes.builds == 0


class TestSubstringEditDistance:
    @pytest.mark.parametrize("pattern, text, expected", [
        ("metal", "scrap metal", 0),
        ("wrkbench", "workbench", 1),
        ("medical", "scrap metal", 3),
        ("abc", "", 3),
        ("", "anything", 0),
        ("kit", "medical kitchen", 0),
        ("kot", "medical kit", 1),
    ])
    def test_distances(self, pattern, text, expected):
        assert substring_edit_distance(pattern, text) == expected


def test_partial_overlap_is_not_a_direct_hit(dataset):
    scrap, med_kit = dataset.items[0], dataset.items[3]
    engine = SearchEngine()
    assert _ids(engine.filter_items_by_name([scrap, med_kit], "Medical")) == ["med-kit"]
    battery = dataset.items[2]
    assert engine.filter_items_by_name([battery], "key") == []
