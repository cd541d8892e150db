"""
Bigtable example: write one reading for a device, read it back by key, then scan
every row of that device.

    python -m examples.client.big_table --device-id sensor-42
"""
import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from core.config import ConfigError, WideColumnConfig, load_env_file
from core.data_model import StoredRow
from core.row_key import device_prefix, row_key
from storage.bigtable_store import BigtableStore
from storage.provider import StoreOperationError, WideColumnProvider

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_ID = "sensor-42"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

SAMPLE_READING = {
    'temp_c': b"27.4",
    'hum_pct': b"61",
}


def write_row(store: WideColumnProvider, config: WideColumnConfig, device_id: str,
              now: Optional[datetime] = None) -> str:
    """Write the sample reading under a fresh key and return the key"""
    now = now or datetime.now(timezone.utc)
    key = row_key(device_id, now)
    store.write_row(key, config.column_family, SAMPLE_READING, timestamp=now)
    print("Wrote row:", key)
    return key


def read_row(store: WideColumnProvider, key: str) -> Optional[StoredRow]:
    row = store.read_row(key)
    if row is None:
        print("Row not found:", key)
        return None

    print("Reading row:", key)
    for family, cells in row.families().items():
        print("Family:", family)
        for cell in cells:
            print(f"  {cell.column} @{cell.timestamp} = {cell.value.decode('utf-8', errors='replace')}")
    return row


def scan_rows(store: WideColumnProvider, prefix: str) -> List[str]:
    print("Scanning rows with prefix:", prefix)
    keys = []
    for row in store.scan_prefix(prefix, latest_only=True):
        print("Row:", row.key)
        keys.append(row.key)
    return keys


def run(store: WideColumnProvider, config: WideColumnConfig, device_id: str = DEFAULT_DEVICE_ID) -> List[str]:
    key = write_row(store, config, device_id)
    read_row(store, key)
    return scan_rows(store, device_prefix(device_id))


def _device_id(value: str) -> str:
    try:
        device_prefix(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write, read and scan device rows in Bigtable")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: search from cwd)")
    parser.add_argument("--device-id", type=_device_id, default=DEFAULT_DEVICE_ID, help="Device whose rows are written and scanned")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    load_env_file(args.env_file)
    try:
        config = WideColumnConfig.from_env()
        store = BigtableStore(config)
        run(store, config, args.device_id)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except StoreOperationError as e:
        logger.error(f"Bigtable example failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
