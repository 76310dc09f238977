# /search/index_builder.py

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

import tantivy

from core.config import settings
from core.database import GraphDBInterface
from core.entity_info import parse_entity_info
from core.logger import get_logger
from core.models import Edge, EntityType, Node, SearchIndexEntry

logger = get_logger(__name__)

TEXT_FIELD = "text"
POSITION_FIELD = "position"

# Mirrors tantivy's default tokenizer: split on non-alphanumerics, lowercase,
# drop tokens of 40 bytes or more.
TOKEN_PATTERN = re.compile(r"[^\W_]+")
MAX_TOKEN_BYTES = 40


def tokenize(text: str) -> List[str]:
    tokens = []
    for token in TOKEN_PATTERN.findall(text):
        if len(token.encode("utf-8")) < MAX_TOKEN_BYTES:
            tokens.append(token.lower())
    return tokens


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def searchable_values(value: Any) -> List[str]:
    """Stringifies a property value. Lists contribute each of their elements."""
    if value is None:
        return []
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (list, tuple)):
        return [text for item in value for text in searchable_values(item)]
    if isinstance(value, dict):
        return [text for item in value.values() for text in searchable_values(item)]
    return [str(value)]


def _property_text(properties: Dict[str, Any]) -> List[str]:
    # Property names are searchable too, so 'name' finds every entity that has a name.
    text = list(properties.keys())
    for value in properties.values():
        text.extend(searchable_values(value))
    return text


def node_entry(node: Node) -> SearchIndexEntry:
    return SearchIndexEntry(
        id=node.id,
        entity_type="node",
        searchable_text=list(node.labels) + _property_text(node.properties),
    )


def edge_entry(edge: Edge) -> SearchIndexEntry:
    return SearchIndexEntry(
        id=edge.id,
        entity_type="edge",
        from_id=edge.from_id,
        to_id=edge.to_id,
        searchable_text=[edge.type] + _property_text(edge.properties),
    )


def type_entry(entity_type: EntityType, kind: str) -> SearchIndexEntry:
    return SearchIndexEntry(
        id=entity_type.name,
        entity_type=kind,
        searchable_text=[entity_type.name] + _unique(a.name for a in entity_type.attributes),
    )


@dataclass
class IndexHit:
    """A document matched by a query, with the indexed terms it matched."""
    entry: SearchIndexEntry
    score: float
    terms: List[str] = field(default_factory=list)


@dataclass
class Suggestion:
    suggestion: str
    terms: List[str]
    score: float


class SearchIndex:
    """
    An immutable, in-memory full-text index over graph entities and entity types.
    Safe to query from any number of concurrent callers.
    """
    def __init__(self, index: tantivy.Index, entries: List[SearchIndexEntry], combine_with: str = None):
        self._index = index
        self._index.reload()
        self._searcher = index.searcher()
        self.entries = entries
        self.combine_with = combine_with or settings.SEARCH_COMBINE_WITH
        self._terms = [
            _unique(token for text in entry.searchable_text for token in tokenize(text))
            for entry in entries
        ]

    def __len__(self):
        return len(self.entries)

    def search(self, query: str, prefix: bool = True, combine_with: str = None) -> List[IndexHit]:
        """
        Returns the documents matching the query, best first.

        Every word of the query matches indexed terms that start with it
        (or equal it when `prefix` is False), case-insensitively.
        """
        words = tokenize(query)
        return self._search(words, [prefix] * len(words), combine_with or self.combine_with)

    def auto_suggest(self, query: str) -> List[Suggestion]:
        """
        Suggests completions of the query. All words but the last are matched
        exactly and the last one as prefix; all of them must match. Each hit
        proposes the phrase of terms it matched; identical phrases are merged
        and their scores averaged.
        """
        words = tokenize(query)
        prefixes = [i == len(words) - 1 for i in range(len(words))]

        merged: Dict[str, Suggestion] = {}
        counts: Dict[str, int] = {}
        for hit in self._search(words, prefixes, "AND"):
            phrase = " ".join(hit.terms)
            if phrase in merged:
                merged[phrase].score += hit.score
                counts[phrase] += 1
            else:
                merged[phrase] = Suggestion(suggestion=phrase, terms=hit.terms, score=hit.score)
                counts[phrase] = 1

        suggestions = []
        for phrase, suggestion in merged.items():
            suggestion.score /= counts[phrase]
            suggestions.append(suggestion)
        suggestions.sort(key=lambda s: s.score, reverse=True)
        return suggestions

    def _search(self, words: Sequence[str], prefixes: Sequence[bool], combine_with: str) -> List[IndexHit]:
        if not words or not self.entries:
            return []

        occur = tantivy.Occur.Must if combine_with == "AND" else tantivy.Occur.Should
        clauses = [
            (occur, tantivy.Query.regex_query(self._index.schema, TEXT_FIELD, word + ".*" if prefix else word))
            for word, prefix in zip(words, prefixes)
        ]
        query = tantivy.Query.boolean_query(clauses)

        hits = []
        for score, address in self._searcher.search(query, len(self.entries)).hits:
            position = self._searcher.doc(address).get_first(POSITION_FIELD)
            terms = self._matched_terms(self._terms[position], words, prefixes)
            hits.append((position, IndexHit(
                entry=self.entries[position],
                score=score * _closeness(words, terms),
                terms=terms,
            )))

        hits.sort(key=lambda item: (-item[1].score, item[0]))
        return [hit for _, hit in hits]

    @staticmethod
    def _matched_terms(doc_terms: List[str], words: Sequence[str], prefixes: Sequence[bool]) -> List[str]:
        matched = []
        for word, prefix in zip(words, prefixes):
            for term in doc_terms:
                hit = term.startswith(word) if prefix else term == word
                if hit and term not in matched:
                    matched.append(term)
        return matched


def _closeness(words: Sequence[str], terms: List[str]) -> float:
    # Between 1 and 2; 2 when every matched term equals a query word.
    if not terms:
        return 1.0
    return 1.0 + min(sum(len(w) for w in words) / sum(len(t) for t in terms), 1.0)


class SearchIndexBuilder:
    """Builds the full-text index from the current graph and schema."""
    def __init__(self, db_client: GraphDBInterface, heap_size: int = None, combine_with: str = None):
        self.db_client = db_client
        self.heap_size = heap_size or settings.SEARCH_INDEX_HEAP_SIZE
        self.combine_with = combine_with or settings.SEARCH_COMBINE_WITH

    async def build_index(self) -> SearchIndex:
        logger.info("Building search index...")
        nodes = await self.db_client.get_all_nodes()
        edges = await self.db_client.get_all_edges()
        node_types = parse_entity_info(await self.db_client.get_node_type_records(), "node")
        edge_types = parse_entity_info(await self.db_client.get_edge_type_records(), "edge")

        entries = self.collect_entries(nodes, edges, node_types, edge_types)
        index = await asyncio.to_thread(self._write_index, entries)

        logger.info(
            f"Search index built with {len(entries)} documents: {len(nodes)} nodes, {len(edges)} edges, "
            f"{len(node_types)} node types, {len(edge_types)} edge types."
        )
        return SearchIndex(index, entries, self.combine_with)

    @staticmethod
    def collect_entries(
        nodes: List[Node],
        edges: List[Edge],
        node_types: List[EntityType],
        edge_types: List[EntityType],
    ) -> List[SearchIndexEntry]:
        entries = [node_entry(node) for node in nodes]
        entries.extend(edge_entry(edge) for edge in edges)
        entries.extend(type_entry(t, "node-type") for t in node_types)
        entries.extend(type_entry(t, "edge-type") for t in edge_types)
        return entries

    def _write_index(self, entries: List[SearchIndexEntry]) -> tantivy.Index:
        schema_builder = tantivy.SchemaBuilder()
        schema_builder.add_text_field(TEXT_FIELD, stored=False)
        schema_builder.add_integer_field(POSITION_FIELD, stored=True)
        schema = schema_builder.build()

        index = tantivy.Index(schema)
        writer = index.writer(heap_size=self.heap_size, num_threads=1)
        for position, entry in enumerate(entries):
            values: Dict[str, list] = {POSITION_FIELD: [position]}
            if entry.searchable_text:
                values[TEXT_FIELD] = entry.searchable_text
            writer.add_document(tantivy.Document(**values))
        writer.commit()
        writer.wait_merging_threads()
        return index
