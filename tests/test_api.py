import unittest
from unittest.mock import AsyncMock

import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings
from core.models import MatchPropertyCondition, OfTypeCondition
from graph_fixtures import FakeGraphDatabase


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.db_client = FakeGraphDatabase()
        self.app = create_app(data_source=self.db_client, settings=Settings(QUERY_NODE_LIMIT=100))
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)


class TestFilterRouter(ApiTestCase):

    def test_known_node_type(self):
        response = self.client.get('/filter/node-type?type=Person')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'name': 'Person',
            'properties': [
                {'key': 'name', 'values': ['Keanu Reeves', 'Carrie-Anne Moss', 'Lana Wachowski']},
                {'key': 'born', 'values': [1964, 1967, 1965]},
            ],
        })

    def test_known_edge_type(self):
        response = self.client.get('/filter/edge-type?type=ACTED_IN')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'name': 'ACTED_IN',
            'properties': [{'key': 'roles', 'values': [['Neo'], ['Trinity']]}],
        })

    def test_unknown_type_returns_empty_model(self):
        for path in ['/filter/node-type', '/filter/edge-type']:
            with self.subTest(path=path):
                response = self.client.get(f'{path}?type=Unknown')

                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.json(), {'name': 'Unknown', 'properties': []})

    def test_empty_type_is_rejected(self):
        for path in ['/filter/node-type', '/filter/edge-type']:
            with self.subTest(path=path):
                self.assertEqual(self.client.get(f'{path}?type=').status_code, 400)

    def test_missing_type_is_rejected(self):
        for path in ['/filter/node-type', '/filter/edge-type']:
            with self.subTest(path=path):
                self.assertEqual(self.client.get(path).status_code, 400)


class TestSearchRouter(ApiTestCase):

    def test_raw_query_string_is_the_search_string(self):
        response = self.client.get('/search/all?Keanu%20Reeves')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'nodes': [{'id': 1}], 'edges': [], 'nodeTypes': [], 'edgeTypes': []})

    def test_q_parameter(self):
        response = self.client.get('/search/all', params={'q': 'trinity'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['edges'], [{'id': 101, 'from': 2, 'to': 10}])

    def test_auto_suggest(self):
        response = self.client.get('/search/auto-suggest?kea')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), ['keanu'])

    def test_index_is_built_once_across_requests(self):
        self.db_client.get_all_nodes = AsyncMock(wraps=self.db_client.get_all_nodes)

        for query in ['kean', 'reev', 'name']:
            response = self.client.get(f'/search/all?{query}')
            self.assertEqual(response.status_code, 200)
            self.assertIn({'id': 1}, response.json()['nodes'])

        self.assertEqual(self.db_client.get_all_nodes.await_count, 1)

    def test_build_failure_is_answered_with_503(self):
        self.db_client.get_all_nodes = AsyncMock(side_effect=ConnectionError('Neo4j is down'))

        self.assertEqual(self.client.get('/search/all?keanu').status_code, 503)
        self.assertEqual(self.client.get('/search/auto-suggest?kea').status_code, 503)
        self.assertEqual(self.db_client.get_all_nodes.await_count, 1)


class TestGraphRouter(ApiTestCase):

    def test_query_all_without_body(self):
        response = self.client.post('/queryAll')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['nodes'], [{'id': 1}, {'id': 2}, {'id': 3}, {'id': 10}])
        self.assertEqual(len(body['edges']), 3)
        self.assertIn({'id': 100, 'from': 1, 'to': 10}, body['edges'])

    def test_query_all_with_limits_and_filters(self):
        response = self.client.post('/queryAll', json={
            'limit': {'nodes': 2, 'edges': 1},
            'filters': {
                'nodes': {'type': 'OfType', 'name': 'Person'},
                'edges': {'type': 'MatchProperty', 'key': 'roles', 'value': ['Neo']},
            },
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['nodes'], [{'id': 1}, {'id': 2}])
        self.assertEqual(self.db_client.received_conditions, [
            ('node', OfTypeCondition(name='Person')),
            ('edge', MatchPropertyCondition(key='roles', value=['Neo'])),
        ])

    def test_query_all_rejects_malformed_condition(self):
        response = self.client.post('/queryAll', json={'filters': {'nodes': {'type': 'OfType'}}})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], "Invalid OfTypeCondition: property 'name' field required.")

    def test_get_nodes_by_id(self):
        response = self.client.get('/getNodesById?ids=3,1')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [
            {'id': 1, 'labels': ['Person'], 'properties': {'name': 'Keanu Reeves', 'born': 1964}},
            {'id': 3, 'labels': ['Person'], 'properties': {'name': 'Lana Wachowski', 'born': 1965}},
        ])

    def test_get_edges_by_id_with_repeated_parameter(self):
        response = self.client.get('/getEdgesById?ids=101&ids=102')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [
            {'id': 101, 'from': 2, 'to': 10, 'type': 'ACTED_IN', 'properties': {'roles': ['Trinity']}},
            {'id': 102, 'from': 3, 'to': 10, 'type': 'DIRECTED', 'properties': {}},
        ])

    def test_non_integer_ids_are_rejected(self):
        self.assertEqual(self.client.get('/getNodesById?ids=1,abc').status_code, 400)


class TestSchemaRouter(ApiTestCase):

    def test_node_types(self):
        response = self.client.get('/schema/node-types')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([(t['name'], t['count']) for t in response.json()], [('Person', 3), ('Movie', 1)])
        self.assertEqual(response.json()[0]['attributes'][1], {'name': 'born', 'types': ['Long'], 'mandatory': True})

    def test_edge_types(self):
        response = self.client.get('/schema/edge-types')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [
            {'name': 'ACTED_IN', 'count': 2, 'attributes': [
                {'name': 'roles', 'types': ['StringArray'], 'mandatory': True},
            ]},
            {'name': 'DIRECTED', 'count': 1, 'attributes': []},
        ])

    def test_node_type_connection_info(self):
        response = self.client.get('/schema/node-type-connection-info')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [{'from': 'Person', 'to': 'Movie', 'numConnections': 3}])

    def test_malformed_schema_record_is_a_server_error(self):
        self.db_client.node_type_records = [{'nodeType': 'Person', 'propertyName': None}]

        self.assertEqual(self.client.get('/schema/node-types').status_code, 500)


class TestLifespan(unittest.TestCase):

    def test_data_source_is_closed_on_shutdown(self):
        db_client = FakeGraphDatabase()
        with TestClient(create_app(data_source=db_client)) as client:
            self.assertEqual(client.get('/').status_code, 200)
        self.assertTrue(db_client.closed)


if __name__ == '__main__':
    unittest.main()
