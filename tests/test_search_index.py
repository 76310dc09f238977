import unittest

import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from core.models import Edge, EntityType, EntityTypeAttribute, Node
from search.index_builder import (
    SearchIndexBuilder,
    edge_entry,
    node_entry,
    searchable_values,
    tokenize,
    type_entry,
)
from graph_fixtures import FakeGraphDatabase


def hit_keys(hits):
    return [(hit.entry.entity_type, hit.entry.id) for hit in hits]


class TestIndexEntries(unittest.TestCase):

    def test_node_entry_carries_labels_keys_and_values(self):
        entry = node_entry(Node(id=1, labels=['Person'], properties={'name': 'Keanu Reeves', 'born': 1964}))

        self.assertEqual(entry.id, 1)
        self.assertEqual(entry.entity_type, 'node')
        self.assertEqual(entry.searchable_text, ['Person', 'name', 'born', 'Keanu Reeves', '1964'])

    def test_edge_entry_copies_endpoints(self):
        entry = edge_entry(Edge(id=100, from_id=1, to_id=10, type='ACTED_IN', properties={'roles': ['Neo']}))

        self.assertEqual((entry.id, entry.from_id, entry.to_id), (100, 1, 10))
        self.assertEqual(entry.entity_type, 'edge')
        self.assertEqual(entry.searchable_text, ['ACTED_IN', 'roles', 'Neo'])

    def test_type_entry_uses_name_as_id(self):
        entity_type = EntityType(name='Person', attributes=[
            EntityTypeAttribute(name='name', types=['String'], mandatory=True),
            EntityTypeAttribute(name='name', types=['String'], mandatory=True),
        ])

        entry = type_entry(entity_type, 'node-type')

        self.assertEqual(entry.id, 'Person')
        self.assertEqual(entry.entity_type, 'node-type')
        self.assertEqual(entry.searchable_text, ['Person', 'name'])

    def test_searchable_values(self):
        self.assertEqual(searchable_values(True), ['true'])
        self.assertEqual(searchable_values(None), [])
        self.assertEqual(searchable_values(['a', 2]), ['a', '2'])
        self.assertEqual(searchable_values(1.5), ['1.5'])

    def test_tokenize(self):
        self.assertEqual(tokenize('Carrie-Anne Moss'), ['carrie', 'anne', 'moss'])
        self.assertEqual(tokenize('ACTED_IN'), ['acted', 'in'])
        self.assertEqual(tokenize('  '), [])
        self.assertEqual(tokenize('x' * 40), [])


class TestSearchIndex(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.db_client = FakeGraphDatabase()
        self.index = await SearchIndexBuilder(self.db_client, combine_with='AND').build_index()

    def test_every_entity_and_type_is_indexed(self):
        # 4 nodes, 3 edges, 2 node types, 2 edge types
        self.assertEqual(len(self.index), 11)

    def test_prefix_queries_find_the_node(self):
        for query in ['Keanu', 'kean', 'reev', 'name', 'KEANU']:
            with self.subTest(query=query):
                self.assertIn(('node', 1), hit_keys(self.index.search(query)))

    def test_attribute_name_finds_entities_and_types(self):
        keys = hit_keys(self.index.search('name'))

        self.assertEqual(
            sorted(k for k in keys if k[0] == 'node'),
            [('node', 1), ('node', 2), ('node', 3)],
        )
        self.assertIn(('node-type', 'Person'), keys)
        self.assertNotIn(('node', 10), keys)

    def test_all_words_must_match(self):
        self.assertEqual(hit_keys(self.index.search('Keanu Reeves')), [('node', 1)])
        self.assertEqual(hit_keys(self.index.search('kea ree')), [('node', 1)])
        self.assertEqual(self.index.search('Keanu Moss'), [])

    def test_any_word_may_match_when_combined_with_or(self):
        keys = hit_keys(self.index.search('Keanu Moss', combine_with='OR'))

        self.assertEqual(sorted(keys), [('node', 1), ('node', 2)])

    def test_exact_search_does_not_complete_words(self):
        self.assertEqual(self.index.search('kean', prefix=False), [])
        self.assertEqual(hit_keys(self.index.search('keanu', prefix=False)), [('node', 1)])

    def test_edge_type_names_are_searchable(self):
        keys = hit_keys(self.index.search('acted'))

        self.assertIn(('edge', 100), keys)
        self.assertIn(('edge', 101), keys)
        self.assertIn(('edge-type', 'ACTED_IN'), keys)
        self.assertNotIn(('edge', 102), keys)

    def test_hits_carry_their_metadata(self):
        hits = self.index.search('trinity')

        self.assertEqual(len(hits), 1)
        self.assertEqual((hits[0].entry.id, hits[0].entry.from_id, hits[0].entry.to_id), (101, 2, 10))
        self.assertEqual(hits[0].terms, ['trinity'])

    def test_empty_query_matches_nothing(self):
        self.assertEqual(self.index.search(''), [])
        self.assertEqual(self.index.search('  -- '), [])

    def test_auto_suggest_completes_the_last_word(self):
        self.assertEqual([s.suggestion for s in self.index.auto_suggest('kea')], ['keanu'])
        self.assertEqual([s.suggestion for s in self.index.auto_suggest('keanu r')], ['keanu reeves'])

    def test_auto_suggest_merges_identical_phrases(self):
        suggestions = self.index.auto_suggest('pers')

        self.assertEqual([s.suggestion for s in suggestions], ['person'])

    def test_auto_suggest_needs_earlier_words_to_match_exactly(self):
        self.assertEqual(self.index.auto_suggest('kea r'), [])


class TestEmptyIndex(unittest.IsolatedAsyncioTestCase):

    async def test_empty_graph_builds_an_empty_index(self):
        db_client = FakeGraphDatabase(nodes=[], edges=[])
        db_client.node_type_records = []
        db_client.edge_type_records = []

        index = await SearchIndexBuilder(db_client).build_index()

        self.assertEqual(len(index), 0)
        self.assertEqual(index.search('anything'), [])
        self.assertEqual(index.auto_suggest('any'), [])


if __name__ == '__main__':
    unittest.main()
