"""
arcsearch/search.py -- Fuzzy item search, direct and by requiring structure.

Scoring is on a 0-1 scale where 0 is an exact match:

    - equal text (case and whitespace insensitive) scores 0;
    - a query contained in the text scores below 0.1, lower the more of
      the text it covers;
    - otherwise the score is the fewest edits (insertions, deletions,
      substitutions) that turn the query into some substring of the
      text, divided by the query length.

A record matches when its best key scores at or under the threshold
(0.4 by default).  A one-letter typo in a five-letter word still finds
its target; a query sharing only a few scattered letters with a text
does not.

``SearchEngine`` keeps one ``FuzzyIndex`` per collection slot and reuses
it for as long as the caller passes the same collection object; a new
object (identity, not equality) triggers a rebuild.

Usage::

    engine = SearchEngine()
    hits = engine.filter_items_by_name(items, "scrap", modules, projects, quests)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from arcsearch.models.entities import HideoutModule, Item, Project, Quest

DEFAULT_THRESHOLD = 0.4

KeyFunc = Callable[[Any], Optional[str]]


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def substring_edit_distance(pattern: str, text: str) -> int:
    """Fewest edits turning *pattern* into any substring of *text*.

    Levenshtein distance with a free start and end in *text* (Sellers'
    algorithm), one column of the table per character of *text*.
    """
    width = len(pattern)
    column = list(range(width + 1))
    best = width
    for ch in text:
        diagonal = column[0]
        for i in range(1, width + 1):
            above = column[i]
            column[i] = min(
                above + 1,
                column[i - 1] + 1,
                diagonal + (pattern[i - 1] != ch),
            )
            diagonal = above
        if column[width] < best:
            best = column[width]
            if best == 0:
                break
    return best


class _IndexedText:
    """A normalized key text plus its letter counts."""

    __slots__ = ("text", "counts")

    def __init__(self, raw: str):
        self.text = _normalize(raw)
        self.counts = Counter(self.text)

    def score(self, query: str, query_counts: Counter, limit: float = 1.0) -> float:
        """Score *query* (already normalized) against this text.

        Texts that cannot score within *limit* are reported as 1.0
        without running the full alignment.
        """
        text = self.text
        if not text:
            return 1.0
        if query == text:
            return 0.0
        if query in text:
            return 0.1 * (1 - len(query) / len(text))

        width = len(query)
        # Every query letter the text lacks costs at least one edit.
        shared = sum(min(n, self.counts[ch]) for ch, n in query_counts.items())
        if (width - shared) / width > limit:
            return 1.0
        return substring_edit_distance(query, text) / width


def fuzzy_score(query: str, text: str) -> float:
    """Score how well *query* matches *text* (0 exact, 1 no match)."""
    normalized = _normalize(query)
    if not normalized:
        return 1.0
    return _IndexedText(text).score(normalized, Counter(normalized))


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchHit:
    record: Any
    score: float
    index: int


class FuzzyIndex:
    """Pre-normalized key texts for one collection.

    Parameters
    ----------
    records : sequence
        The records to search.
    keys : sequence of callables
        Each returns one searchable text for a record, or ``None``.
    """

    def __init__(self, records: Sequence[Any], keys: Sequence[KeyFunc]):
        self.records = records
        self._entries: list[tuple[int, Any, list[_IndexedText]]] = []
        for index, record in enumerate(records):
            texts = []
            for key in keys:
                value = key(record)
                if value:
                    texts.append(_IndexedText(value))
            self._entries.append((index, record, texts))

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str, threshold: float = DEFAULT_THRESHOLD) -> list[SearchHit]:
        """Return matching records, best first; ties keep input order."""
        normalized = _normalize(query)
        if not normalized:
            return []

        query_counts = Counter(normalized)

        hits = []
        for index, record, texts in self._entries:
            if not texts:
                continue
            score = min(text.score(normalized, query_counts, threshold) for text in texts)
            if score <= threshold:
                hits.append(SearchHit(record=record, score=score, index=index))
        hits.sort(key=lambda hit: (hit.score, hit.index))
        return hits


class IndexCache:
    """Holds one ``(collection, index)`` pair per named slot.

    The stored index is reused while the same collection object comes
    back; any other object replaces it.
    """

    def __init__(self):
        self._slots: dict[str, tuple[Any, FuzzyIndex]] = {}
        self.builds = 0

    def get(
        self,
        slot: str,
        collection: Any,
        build: Callable[[Any], FuzzyIndex],
    ) -> FuzzyIndex:
        cached = self._slots.get(slot)
        if cached is not None and cached[0] is collection:
            return cached[1]
        index = build(collection)
        self._slots[slot] = (collection, index)
        self.builds += 1
        return index

    def clear(self) -> None:
        self._slots.clear()


# ---------------------------------------------------------------------------
# Key functions
# ---------------------------------------------------------------------------

def _name_key(record: Any) -> str | None:
    return record.name.en


def _description_key(record: Any) -> str | None:
    description = getattr(record, "description", None)
    return description.en if description is not None else None


def _phase_name_key(phase: Any) -> str | None:
    return phase.display_name


ITEM_KEYS: tuple[KeyFunc, ...] = (_name_key, _description_key)
NAME_KEYS: tuple[KeyFunc, ...] = (_name_key,)


def _all_phases(projects: Iterable[Project]) -> list:
    return [phase for project in projects for phase in project.phases]


# ---------------------------------------------------------------------------
# SearchEngine
# ---------------------------------------------------------------------------

class SearchEngine:
    """Fuzzy search over items and the structures that require them.

    Parameters
    ----------
    threshold : float
        Maximum score (0 exact, 1 unrelated) that still counts as a match.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold
        self.indexes = IndexCache()

    def _index(self, slot: str, collection: Any, keys: Sequence[KeyFunc]) -> FuzzyIndex:
        return self.indexes.get(slot, collection, lambda records: FuzzyIndex(records, keys))

    def search_items(self, items: Sequence[Item], query: str) -> list[SearchHit]:
        """Items whose name or description matches *query*, best first."""
        return self._index("items", items, ITEM_KEYS).search(query, self.threshold)

    def find_items_required_by_source(
        self,
        hideout_modules: Sequence[HideoutModule],
        projects: Sequence[Project],
        quests: Sequence[Quest],
        query: str,
    ) -> set[str]:
        """Item ids required by any structure whose name matches *query*.

        Matches module names, project names, project phase names and
        quest names.  A matching module or project contributes the items
        of all its levels/phases; a matching phase contributes only its
        own items.
        """
        item_ids: set[str] = set()
        if not query.strip():
            return item_ids

        for hit in self._index("modules", hideout_modules, NAME_KEYS).search(query, self.threshold):
            for level in hit.record.levels:
                item_ids.update(req.item_id for req in level.requirement_item_ids)

        for hit in self._index("projects", projects, NAME_KEYS).search(query, self.threshold):
            for phase in hit.record.phases:
                item_ids.update(req.item_id for req in phase.requirement_item_ids)

        phase_index = self.indexes.get(
            "phases",
            projects,
            lambda records: FuzzyIndex(_all_phases(records), (_phase_name_key,)),
        )
        for hit in phase_index.search(query, self.threshold):
            item_ids.update(req.item_id for req in hit.record.requirement_item_ids)

        for hit in self._index("quests", quests, NAME_KEYS).search(query, self.threshold):
            if hit.record.required_item_ids:
                item_ids.update(req.item_id for req in hit.record.required_item_ids)

        return item_ids

    def filter_items_by_name(
        self,
        items: Sequence[Item],
        query: str,
        hideout_modules: Sequence[HideoutModule] | None = None,
        projects: Sequence[Project] | None = None,
        quests: Sequence[Quest] | None = None,
    ) -> list[Item]:
        """Search items by name/description, then by requiring structure.

        Direct matches come first, best first.  Items that only match
        because a matching module, project, phase or quest requires them
        follow, in input order.  Source matching only runs when all three
        source collections are given.  No item id appears twice.

        An empty or whitespace-only query returns every item, in order.
        """
        if not query.strip():
            return list(items)

        results: list[Item] = []
        seen: set[str] = set()
        for hit in self.search_items(items, query):
            if hit.record.id in seen:
                continue
            seen.add(hit.record.id)
            results.append(hit.record)

        if hideout_modules is None or projects is None or quests is None:
            return results

        source_ids = self.find_items_required_by_source(hideout_modules, projects, quests, query)
        for item in items:
            if item.id in source_ids and item.id not in seen:
                seen.add(item.id)
                results.append(item)
        return results


_default_engine = SearchEngine()


def filter_items_by_name(
    items: Sequence[Item],
    query: str,
    hideout_modules: Sequence[HideoutModule] | None = None,
    projects: Sequence[Project] | None = None,
    quests: Sequence[Quest] | None = None,
) -> list[Item]:
    """Module-level shortcut for ``SearchEngine.filter_items_by_name``."""
    return _default_engine.filter_items_by_name(items, query, hideout_modules, projects, quests)


def find_items_required_by_source(
    hideout_modules: Sequence[HideoutModule],
    projects: Sequence[Project],
    quests: Sequence[Quest],
    query: str,
) -> set[str]:
    """Module-level shortcut for ``SearchEngine.find_items_required_by_source``."""
    return _default_engine.find_items_required_by_source(hideout_modules, projects, quests, query)
