import logging
from typing import Any, Dict, List

import pyarrow as pa
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery

from core.config import WarehouseConfig
from storage.provider import StoreOperationError, WarehouseProvider

logger = logging.getLogger(__name__)


class BigQueryWarehouse(WarehouseProvider):
    """BigQueryWarehouse streams rows into one table and returns query results as Arrow"""
    def __init__(self, config: WarehouseConfig) -> None:
        self.table_ref = config.table_ref
        try:
            self.client = bigquery.Client(project=config.project_id)
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to create BigQuery client for {config.project_id}: {e}")
            raise StoreOperationError("bigquery.Client", e) from e

    def insert(self, rows: List[Dict[str, Any]], row_ids: List[str]) -> None:
        """Streaming insert; the service drops rows whose row id it has already seen"""
        if len(rows) != len(row_ids):
            raise ValueError(f"Got {len(rows)} rows but {len(row_ids)} row ids")

        try:
            errors = self.client.insert_rows_json(self.table_ref, rows, row_ids=row_ids)
        except GoogleAPIError as e:
            logger.error(f"Failed to insert into {self.table_ref}: {e}")
            raise StoreOperationError("insert_rows_json", e) from e

        if errors:
            logger.error(f"Insert into {self.table_ref} rejected rows: {errors}")
            raise StoreOperationError(f"insert_rows_json: {len(errors)} row(s) rejected: {errors}")

        logger.info(f"Inserted {len(rows)} rows into {self.table_ref}")

    def query(self, sql: str) -> pa.Table:
        try:
            result = self.client.query(sql).result()
            table = result.to_arrow(create_bqstorage_client=False)
        except GoogleAPIError as e:
            logger.error(f"Query failed: {e}")
            raise StoreOperationError("query.result", e) from e

        logger.info(f"Query returned {table.num_rows} rows")
        return table

    def close(self) -> None:
        self.client.close()
