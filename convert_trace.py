#!/usr/bin/env python3
"""
MinIO Statemap - Command Line Entry Point
"""

import argparse
import logging
import sys

from minio_statemap import StatemapConverter, StatemapError
from minio_statemap.core.types import DEFAULT_HOST, DEFAULT_TITLE
from minio_statemap.logging_config import setup_logging

logger = logging.getLogger('minio_statemap.cli')


def parse_color(value):
    """Parse a STATE=COLOR option."""
    state, sep, color = value.partition('=')
    if not sep or not state or not color:
        raise argparse.ArgumentTypeError(f"expected STATE=COLOR, got {value!r}")
    return state, color


def build_parser():
    parser = argparse.ArgumentParser(
        prog='minio-statemap',
        description='Convert MinIO JSON trace output to statemap input.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python convert_trace.py -i ./my_minio_trace.out > minio_states
  python convert_trace.py -i trace.out -t "PUT storm" -c us-east-1 -o states.out
  python convert_trace.py -i trace.out --color s3.PutObject=red --color s3.GetObject=green
        """
    )
    parser.add_argument('-i', '--input-file', required=True, metavar='FILE',
                        help='path to minio trace file to be parsed')
    parser.add_argument('-c', '--cluster-name', default=DEFAULT_HOST, metavar='NAME',
                        help='name of the cluster for display in the rendered statemap')
    parser.add_argument('-t', '--title', default=DEFAULT_TITLE, metavar='TITLE',
                        help='statemap title')
    parser.add_argument('-o', '--output', dest='output_file', default=None, metavar='FILE',
                        help='write statemap data to FILE instead of stdout')
    parser.add_argument('--color', dest='colors', action='append', type=parse_color, default=[],
                        metavar='STATE=COLOR', help='display color for a state (repeatable)')
    parser.add_argument('--workers', type=int, default=1,
                        help='worker processes used to aggregate large traces')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    converter = StatemapConverter(
        title=args.title,
        host=args.cluster_name,
        state_colors=dict(args.colors),
        num_workers=args.workers
    )

    try:
        # Aggregate the whole trace before opening the output
        trace = converter.aggregate_file(args.input_file)
        if args.output_file:
            with open(args.output_file, 'w') as out:
                converter.write(trace, out)
        else:
            converter.write(trace, sys.stdout)
    except FileNotFoundError as e:
        logger.error("File '%s' not found.", e.filename)
        return 1
    except StatemapError as e:
        logger.error("Invalid trace '%s': %s", args.input_file, e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
