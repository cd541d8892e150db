"""
BigQuery example: optionally stream a sample event into the events table, then
print the most recent events.

    python -m examples.client.big_query --insert-sample --limit 5
"""
import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.config import ConfigError, WarehouseConfig, load_env_file
from core.data_model import EventRow, events_from_arrow
from storage.bigquery_store import BigQueryWarehouse
from storage.provider import StoreOperationError, WarehouseProvider

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def build_events_query(config: WarehouseConfig, limit: int = DEFAULT_LIMIT) -> str:
    """Latest events first"""
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    return (
        "SELECT event_id, device_id, timestamp, temperature\n"
        f"FROM `{config.table_ref}`\n"
        "ORDER BY timestamp DESC\n"
        f"LIMIT {int(limit)}"
    )


def sample_event(now: Optional[datetime] = None) -> EventRow:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    # unix nanos, microsecond resolution
    nanos = (now - _EPOCH) // timedelta(microseconds=1) * 1000
    return EventRow(
        event_id=f"evt-{nanos}",
        device_id="device-123",
        timestamp=now,
        temperature=27.35,
    )


def insert_events(store: WarehouseProvider, rows: List[EventRow]) -> None:
    """Stream rows with their event_id as the insert id, so retried inserts are not duplicated"""
    if not rows:
        return
    print("Streaming rows into BigQuery...")
    store.insert([r.to_json() for r in rows], row_ids=[r.event_id for r in rows])


def query_events_table(store: WarehouseProvider, config: WarehouseConfig,
                       limit: int = DEFAULT_LIMIT) -> List[EventRow]:
    table = store.query(build_events_query(config, limit))
    events = events_from_arrow(table)

    print(f"Query results from `{config.table_ref}`:")
    for event in events:
        print(event.describe())
    return events


def run(store: WarehouseProvider, config: WarehouseConfig, limit: int = DEFAULT_LIMIT) -> List[EventRow]:
    if config.insert_sample:
        insert_events(store, [sample_event()])
        print("Inserted 1 sample row.")
    return query_events_table(store, config, limit)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query (and optionally insert into) a BigQuery events table")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: search from cwd)")
    parser.add_argument("--insert-sample", action="store_true",
                        help="Insert a sample row first (same as BIG_QUERY_INSERT_SAMPLE=1)")
    parser.add_argument("--limit", type=_positive_int, default=DEFAULT_LIMIT, help="Number of events to print")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    load_env_file(args.env_file)
    try:
        config = WarehouseConfig.from_env()
        if args.insert_sample and not config.insert_sample:
            config = replace(config, insert_sample=True)

        store = BigQueryWarehouse(config)
        try:
            run(store, config, args.limit)
        finally:
            store.close()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except StoreOperationError as e:
        logger.error(f"BigQuery example failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
