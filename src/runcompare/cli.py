"""
Command line front end.

    runcompare catalog runs.csv
    runcompare align runs.csv --metric loss -e E1 -e E2
    runcompare plot runs.csv --metric loss -e E1 -e E2 --output loss.png
"""

import argparse
import sys
from typing import List, Optional

from runcompare import (
    LoggingConfigError,
    __version__,
    configure_console_logging,
    logger,
    reset_logging,
)
from runcompare.api import ComparisonSession
from runcompare.exceptions import RunCompareError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runcompare",
        description="Compare one metric across experiment runs on a shared step axis",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--config', type=str, help='Path to a YAML configuration file')
    parser.add_argument(
        '--log-level',
        type=str,
        default='WARNING',
        help='Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)'
    )

    sub = parser.add_subparsers(dest='command', required=True)

    catalog = sub.add_parser('catalog', help='List experiments and metrics in a file')
    catalog.add_argument('file', help='CSV file with experiment_id, metric_name, step, value')
    catalog.add_argument('--search', default='', help='Only list experiments containing this text')

    for name, help_text in (('align', 'Print the aligned table as CSV'), ('plot', 'Export a line chart')):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument('file', help='CSV file with experiment_id, metric_name, step, value')
        cmd.add_argument('--metric', '-m', required=True, help='Metric to compare')
        cmd.add_argument(
            '--experiment', '-e', action='append', default=[], dest='experiments',
            help='Experiment to include (repeatable, order is kept)'
        )
        if name == 'plot':
            cmd.add_argument('--output', '-o', required=True, help='Image file to write')

    return parser


def _cmd_catalog(session: ComparisonSession, args: argparse.Namespace) -> int:
    catalog = session.catalog
    print("Experiments:")
    for experiment_id in catalog.search_experiments(args.search):
        print(f"  {experiment_id}")
    print("Metrics:")
    for metric in catalog.metrics:
        print(f"  {metric}")
    return 0


def _select(session: ComparisonSession, args: argparse.Namespace) -> None:
    session.select_metric(args.metric)
    session.select_experiments(args.experiments)


def _cmd_align(session: ComparisonSession, args: argparse.Namespace) -> int:
    _select(session, args)
    aligned = session.aligned()
    if aligned is None:
        print("No result: choose a known metric and at least one experiment", file=sys.stderr)
        return 1
    sys.stdout.write(aligned.to_dataframe().to_csv(na_rep=""))
    return 0


def _cmd_plot(session: ComparisonSession, args: argparse.Namespace) -> int:
    _select(session, args)
    payload = session.export_image(args.output)
    if payload is None:
        print("No result: choose a known metric and at least one experiment", file=sys.stderr)
        return 1
    print(f"Wrote {len(payload)} bytes to {args.output}")
    return 0


_COMMANDS = {
    'catalog': _cmd_catalog,
    'align': _cmd_align,
    'plot': _cmd_plot,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface and return the exit status."""
    args = _build_parser().parse_args(argv)

    reset_logging()
    try:
        configure_console_logging(
            level=args.log_level, colorize=sys.stderr.isatty(), destination=sys.stderr
        )
    except LoggingConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        session = ComparisonSession(args.config)
        session.ingest_file(args.file)
        return _COMMANDS[args.command](session, args)
    except RunCompareError as e:
        logger.debug(repr(e))
        print(f"error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
