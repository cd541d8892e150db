import logging
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigtable
from google.cloud.bigtable import row_filters
from google.cloud.bigtable.row_set import RowSet
from google.rpc import code_pb2

from core.config import WideColumnConfig
from core.data_model import StoredCell, StoredRow
from storage.provider import StoreOperationError, WideColumnProvider

logger = logging.getLogger(__name__)


def _to_str(value) -> str:
    return value.decode('utf-8', errors='replace') if isinstance(value, bytes) else str(value)


def _stored_row(row_data) -> StoredRow:
    """Flatten a PartialRowData into a StoredRow"""
    cells = []
    for family, columns in row_data.cells.items():
        for column, versions in columns.items():
            for cell in versions:
                cells.append(StoredCell(
                    family=family,
                    column=_to_str(column),
                    timestamp=cell.timestamp,
                    value=cell.value,
                ))
    return StoredRow(key=_to_str(row_data.row_key), cells=cells)


class BigtableStore(WideColumnProvider):
    """BigtableStore reads and writes rows of a single Bigtable table"""
    def __init__(self, config: WideColumnConfig) -> None:
        try:
            self.client = bigtable.Client(project=config.project_id, admin=False)
            self.table = self.client.instance(config.instance_id).table(config.table_id)
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to create Bigtable client for {config.project_id}/{config.instance_id}: {e}")
            raise StoreOperationError("bigtable.Client", e) from e

    def write_row(self, key: str, family: str, values: Dict[str, bytes],
                  timestamp: Optional[datetime] = None) -> None:
        timestamp = timestamp or datetime.now(timezone.utc)
        row = self.table.direct_row(key)
        for column, value in values.items():
            row.set_cell(family, column, value, timestamp=timestamp)

        try:
            status = row.commit()
        except GoogleAPIError as e:
            logger.error(f"Failed to write row {key}: {e}")
            raise StoreOperationError(f"write row {key}", e) from e

        if status is not None and status.code != code_pb2.OK:
            logger.error(f"Write of row {key} returned status {status.code}: {status.message}")
            raise StoreOperationError(f"write row {key}: status {status.code} {status.message}")

        logger.info(f"Wrote {len(values)} cells to row {key}")

    def read_row(self, key: str) -> Optional[StoredRow]:
        try:
            row_data = self.table.read_row(key)
        except GoogleAPIError as e:
            logger.error(f"Failed to read row {key}: {e}")
            raise StoreOperationError(f"read row {key}", e) from e

        if row_data is None:
            return None
        return _stored_row(row_data)

    def scan_prefix(self, prefix: str, latest_only: bool = True) -> Iterator[StoredRow]:
        row_set = RowSet()
        row_set.add_row_range_with_prefix(prefix)
        # only the newest version of each column
        row_filter = row_filters.CellsColumnLimitFilter(1) if latest_only else None

        count = 0
        try:
            for row_data in self.table.read_rows(row_set=row_set, filter_=row_filter):
                count += 1
                yield _stored_row(row_data)
        except GoogleAPIError as e:
            logger.error(f"Failed to scan prefix {prefix}: {e}")
            raise StoreOperationError(f"scan rows with prefix {prefix}", e) from e

        logger.info(f"Scanned {count} rows with prefix {prefix}")
