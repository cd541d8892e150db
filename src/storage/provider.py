from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import pyarrow as pa

from core.data_model import StoredRow


class StoreOperationError(Exception):
    """
    Wraps a failed call against a managed data service.
    Attributes:
        message (str): Which operation failed, human readable.
        original_exception (Exception, optional): The SDK error that triggered this one.
    """

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception

    def __str__(self):
        if self.original_exception:
            return f"{self.message} (Caused by: {repr(self.original_exception)})"
        return self.message

    def __repr__(self):
        return f"{self.__class__.__name__}(message={self.message!r}, original_exception={self.original_exception!r})"


class WarehouseProvider(ABC):
    """Abstract interface for the analytical warehouse"""

    @abstractmethod
    def insert(self, rows: List[Dict[str, Any]], row_ids: List[str]) -> None:
        """Stream rows into the events table; row_ids are the deduplication tokens"""
        pass

    @abstractmethod
    def query(self, sql: str) -> pa.Table:
        """Run a read-only query and return all result rows"""
        pass

    def close(self) -> None:
        """Release the underlying client"""
        pass


class WideColumnProvider(ABC):
    """Abstract interface for the wide-column store"""

    @abstractmethod
    def write_row(self, key: str, family: str, values: Dict[str, bytes],
                  timestamp: Optional[datetime] = None) -> None:
        """Set the given columns of one row in a single mutation"""
        pass

    @abstractmethod
    def read_row(self, key: str) -> Optional[StoredRow]:
        """Read one row by key, None if it does not exist"""
        pass

    @abstractmethod
    def scan_prefix(self, prefix: str, latest_only: bool = True) -> Iterator[StoredRow]:
        """Yield every row whose key starts with prefix, in key order"""
        pass
