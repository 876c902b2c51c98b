"""
Command line entry point for the student batch allocation system.

Examples:

    python main.py allocate students.csv --batch B1:30 --batch B2:30 --strategy score-desc
    python main.py allocate students.csv --batch B1:30 --batch B2:30 --export-students
    python main.py summary students.csv
    python main.py lookup students.csv 590025156
"""
import argparse
import logging
import os
import random
import sys
from typing import List, Optional, Tuple

from batch_allocator import allocate_batches
from batch_store import BatchStore
from config import load_config
from csv_handler import StudentCsvHandler
from errors import BatchAllocationError
from excel_handler import ExcelHandler
from ordering import DEFAULT_STRATEGY, STRATEGIES
from reporting import batch_roster, student_record, summarize

logger = logging.getLogger(__name__)


def parse_batch_option(value: str) -> Tuple[str, int]:
    """Parse NAME:CAPACITY; the capacity itself is checked by the store."""
    name, sep, capacity = value.rpartition(':')
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME:CAPACITY, got {value!r}")
    try:
        return name, int(capacity)
    except ValueError:
        raise argparse.ArgumentTypeError(f"capacity must be an integer in {value!r}")


def build_parser(config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Student batch allocation")
    parser.add_argument('--log-level', default=config['LOG_LEVEL'],
                        help="logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest='command', required=True)

    allocate = subparsers.add_parser('allocate', help="allocate students into batches")
    allocate.add_argument('data', nargs='?', default=config['DATA_FILE'])
    allocate.add_argument('--batch', dest='batches', action='append', type=parse_batch_option,
                          required=True, metavar='NAME:CAPACITY')
    allocate.add_argument('--strategy', choices=list(STRATEGIES), default=DEFAULT_STRATEGY)
    allocate.add_argument('--seed', type=int, default=config['RANDOM_SEED'],
                          help="seed for the random strategy")
    allocate.add_argument('--output', help="save the allocated roster to this CSV file")
    allocate.add_argument('--export', action='store_true',
                          help="export the allocation to an Excel workbook")
    allocate.add_argument('--export-students', action='store_true',
                          help="export the allocated roster as a flat Excel table")

    summary = subparsers.add_parser('summary', help="print summary counts")
    summary.add_argument('data', nargs='?', default=config['DATA_FILE'])
    summary.add_argument('--batch', dest='batches', action='append', type=parse_batch_option,
                         default=[], metavar='NAME:CAPACITY')

    lookup = subparsers.add_parser('lookup', help="show one student's allocation")
    lookup.add_argument('data', nargs='?', default=config['DATA_FILE'])
    lookup.add_argument('key')

    return parser


def load_session(config, data_file: str, batches) -> BatchStore:
    store = BatchStore(max_students=config['MAX_STUDENTS'], max_batches=config['MAX_BATCHES'])
    if os.path.exists(data_file):
        StudentCsvHandler().load_store(store, data_file)
    else:
        logger.warning(f"{data_file} not found, starting with an empty roster")
    for name, capacity in batches:
        store.add_batch(name, capacity)
    return store


def print_summary(summary):
    print("=== Summary Report ===")
    print(f"Total students: {summary['total_students']}")
    print(f"Total batches: {summary['total_batches']}")
    print(f"Allocated students: {summary['allocated_count']}")
    print(f"Unallocated students: {summary['unallocated_count']}")
    print(f"Total capacity: {summary['total_capacity']}")


def print_roster(roster):
    for batch in roster:
        print(f"Batch {batch['index']}: {batch['name']} ({batch['filled']}/{batch['capacity']})")
        if not batch['members']:
            print("  (no members)")
        for member in batch['members']:
            print(f"   {member['key']} - {member['name']} ({member['score']})")


def run_allocate(args, config) -> int:
    store = load_session(config, args.data, args.batches)
    rng = random.Random(args.seed) if args.seed is not None else None
    unplaced = allocate_batches(store, args.strategy, rng=rng)

    print_roster(batch_roster(store))
    if unplaced:
        print(f"Not allocated (all batches full): {', '.join(unplaced)}")
    print_summary(summarize(store))

    if args.output:
        StudentCsvHandler().save_store(store, args.output)
        print(f"Saved {store.student_count} students to {args.output}")
    if args.export:
        filepath = ExcelHandler(config['EXPORT_FOLDER']).export_allocation(store)
        print(f"Exported allocation to {filepath}")
    if args.export_students:
        filepath = ExcelHandler(config['EXPORT_FOLDER']).export_students(store)
        print(f"Exported students to {filepath}")
    return 0


def run_summary(args, config) -> int:
    store = load_session(config, args.data, args.batches)
    print_summary(summarize(store))
    return 0


def run_lookup(args, config) -> int:
    store = load_session(config, args.data, [])
    record = student_record(store, args.key)
    if record is None:
        print("Student not found.")
        return 1
    print(f"SAP: {record['key']}")
    print(f"Name: {record['name']}")
    print(f"Marks: {record['score']}")
    if record['batch_index'] is None:
        print("Allocated Batch: Not allocated")
    else:
        # Batches are not saved, so only the stored index is known here
        print(f"Allocated Batch: index {record['batch_index']}")
    return 0


COMMANDS = {
    'allocate': run_allocate,
    'summary': run_summary,
    'lookup': run_lookup,
}


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = load_config()
    except BatchAllocationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    args = build_parser(config).parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))

    try:
        return COMMANDS[args.command](args, config)
    except BatchAllocationError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
