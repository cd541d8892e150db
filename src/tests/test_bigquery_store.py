import pytest
from unittest.mock import patch

import pyarrow as pa
from google.api_core.exceptions import BadRequest, ServiceUnavailable
from google.auth.exceptions import DefaultCredentialsError

from core.config import WarehouseConfig
from storage.bigquery_store import BigQueryWarehouse
from storage.provider import StoreOperationError


@pytest.fixture
def config():
    return WarehouseConfig(project_id='demo-project', dataset_id='iot', table_id='events')


@pytest.fixture
def sample_rows():
    return [
        {'event_id': 'evt-1', 'device_id': 'device-123', 'timestamp': '2024-01-01T00:00:00+00:00', 'temperature': 27.35},
        {'event_id': 'evt-2', 'device_id': 'device-123', 'timestamp': '2024-01-01T00:01:00+00:00', 'temperature': None},
    ]


class TestBigQueryWarehouse:
    """Test suite for BigQueryWarehouse"""

    @patch('google.cloud.bigquery.Client')
    def test_init(self, mock_client_cls, config):
        store = BigQueryWarehouse(config)

        mock_client_cls.assert_called_once_with(project='demo-project')
        assert store.client is mock_client_cls.return_value
        assert store.table_ref == 'demo-project.iot.events'

    @patch('google.cloud.bigquery.Client')
    def test_init_failure(self, mock_client_cls, config):
        mock_client_cls.side_effect = DefaultCredentialsError('no credentials')

        with pytest.raises(StoreOperationError) as exc_info:
            BigQueryWarehouse(config)
        assert 'bigquery.Client' in str(exc_info.value)
        assert isinstance(exc_info.value.original_exception, DefaultCredentialsError)

    @patch('google.cloud.bigquery.Client')
    def test_insert_passes_row_ids(self, mock_client_cls, config, sample_rows):
        mock_client = mock_client_cls.return_value
        mock_client.insert_rows_json.return_value = []

        store = BigQueryWarehouse(config)
        store.insert(sample_rows, row_ids=['evt-1', 'evt-2'])

        mock_client.insert_rows_json.assert_called_once_with(
            'demo-project.iot.events', sample_rows, row_ids=['evt-1', 'evt-2']
        )

    @patch('google.cloud.bigquery.Client')
    def test_insert_row_errors(self, mock_client_cls, config, sample_rows):
        mock_client = mock_client_cls.return_value
        mock_client.insert_rows_json.return_value = [
            {'index': 1, 'errors': [{'reason': 'invalid', 'message': 'no such field'}]}
        ]

        store = BigQueryWarehouse(config)
        with pytest.raises(StoreOperationError, match='1 row\\(s\\) rejected'):
            store.insert(sample_rows, row_ids=['evt-1', 'evt-2'])

    @patch('google.cloud.bigquery.Client')
    def test_insert_api_failure(self, mock_client_cls, config, sample_rows):
        mock_client = mock_client_cls.return_value
        mock_client.insert_rows_json.side_effect = ServiceUnavailable('backend down')

        store = BigQueryWarehouse(config)
        with pytest.raises(StoreOperationError) as exc_info:
            store.insert(sample_rows, row_ids=['evt-1', 'evt-2'])
        assert exc_info.value.__cause__ is exc_info.value.original_exception

    @patch('google.cloud.bigquery.Client')
    def test_insert_mismatched_ids(self, mock_client_cls, config, sample_rows):
        store = BigQueryWarehouse(config)
        with pytest.raises(ValueError):
            store.insert(sample_rows, row_ids=['evt-1'])
        mock_client_cls.return_value.insert_rows_json.assert_not_called()

    @patch('google.cloud.bigquery.Client')
    def test_query_returns_arrow(self, mock_client_cls, config):
        mock_client = mock_client_cls.return_value
        expected = pa.table({'event_id': ['evt-1'], 'temperature': [27.35]})
        mock_client.query.return_value.result.return_value.to_arrow.return_value = expected

        store = BigQueryWarehouse(config)
        result = store.query('SELECT 1')

        mock_client.query.assert_called_once_with('SELECT 1')
        mock_client.query.return_value.result.return_value.to_arrow.assert_called_once_with(
            create_bqstorage_client=False
        )
        assert result is expected

    @patch('google.cloud.bigquery.Client')
    def test_query_failure(self, mock_client_cls, config):
        mock_client = mock_client_cls.return_value
        mock_client.query.return_value.result.side_effect = BadRequest('Syntax error')

        store = BigQueryWarehouse(config)
        with pytest.raises(StoreOperationError, match='query.result'):
            store.query('SELEC 1')

    @patch('google.cloud.bigquery.Client')
    def test_close(self, mock_client_cls, config):
        store = BigQueryWarehouse(config)
        store.close()
        mock_client_cls.return_value.close.assert_called_once_with()
