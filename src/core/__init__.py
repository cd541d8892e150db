from core.config import ConfigError, WarehouseConfig, WideColumnConfig, load_env_file
from core.data_model import EventRow, StoredCell, StoredRow, events_from_arrow
from core.row_key import device_prefix, reverse_millis, row_key

__all__ = [
    "ConfigError",
    "WarehouseConfig",
    "WideColumnConfig",
    "load_env_file",
    "EventRow",
    "StoredCell",
    "StoredRow",
    "events_from_arrow",
    "device_prefix",
    "reverse_millis",
    "row_key"
]
