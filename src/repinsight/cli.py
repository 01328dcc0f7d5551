"""Command-line interface for RepInsight."""

import argparse
import json
import logging
import sys

from .core.aggregate import aggregate
from .core.config import settings
from .core.constants import FileConstants
from .services.llm import LLMServiceFactory
from .services.report import ReportService
from .services.summary_cache import SummaryCache
from .utils.data_prep import export_to_json, load_reviews

logger = logging.getLogger(__name__)


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT
    )


def _emit(payload: dict, out: str = None):
    if out:
        export_to_json(payload, out)
        print(f"Results exported to {out}")
    else:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_aggregate(args):
    """Aggregate command."""
    reviews = load_reviews(args.input_file)
    agg = aggregate(args.userkey, reviews, args.score)

    payload = agg.to_dict()
    _emit(payload, args.out)

    if args.out:
        print(f"\nAggregate for '{args.userkey}':")
        print(f"Reviews: {agg.counts.total} ({agg.counts.positive} positive, "
              f"{agg.counts.negative} negative, {agg.counts.neutral} neutral)")
        print(f"Months: {len(agg.timeline)}  Spikes: {len(agg.spikes)}  Outliers: {len(agg.outliers)}")


def cmd_summarize(args):
    """Summarize command (offline, from a reviews file)."""
    reviews = load_reviews(args.input_file)
    service = ReportService(llm=LLMServiceFactory.create())
    report = service.report_from_reviews(
        args.userkey, reviews, current_score=args.score, profile_name=args.name
    )

    payload = report.to_dict()
    _emit(payload, args.out)


def cmd_report(args):
    """Report command (live fetch from Ethos)."""
    service = ReportService(cache=SummaryCache())
    report = service.build_report(args.userkey, force_refresh=args.refresh)

    payload = report.to_dict()
    _emit(payload, args.out)

    print(f"\nSummary for '{args.userkey}':")
    print(report.summary.summary)
    for insight in report.spike_insights:
        print(f"  {insight.month} [{insight.type.value}] {insight.analysis}")


def cmd_export(args):
    """Export command."""
    try:
        with open(args.input_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if args.pretty:
            print(json.dumps(data, indent=2, ensure_ascii=False))
        else:
            output_file = args.output or args.input_file.replace('.json', '_export.json')
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            print(f"Exported to {output_file}")

    except FileNotFoundError:
        print(f"Input file {args.input_file} not found")
        raise
    except json.JSONDecodeError as e:
        print(f"Invalid JSON in input file: {e}")
        raise


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="RepInsight - Reputation Review Intelligence")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Aggregate command
    aggregate_parser = subparsers.add_parser('aggregate', help='Aggregate a reviews file')
    aggregate_parser.add_argument('--in', dest='input_file', required=True, help='Reviews JSON file')
    aggregate_parser.add_argument('--userkey', default='unknown', help='Subject userkey')
    aggregate_parser.add_argument('--score', type=int, help='Current reputation score')
    aggregate_parser.add_argument('--out', help='Output JSON file')

    # Summarize command
    summarize_parser = subparsers.add_parser('summarize', help='Summarize a reviews file')
    summarize_parser.add_argument('--in', dest='input_file', required=True, help='Reviews JSON file')
    summarize_parser.add_argument('--userkey', default='unknown', help='Subject userkey')
    summarize_parser.add_argument('--score', type=int, help='Current reputation score')
    summarize_parser.add_argument('--name', help='Name used to refer to the subject')
    summarize_parser.add_argument('--out', help='Output JSON file')

    # Report command
    report_parser = subparsers.add_parser('report', help='Fetch reviews and build a full report')
    report_parser.add_argument('userkey', help='Subject userkey, e.g. service:x.com:44196397')
    report_parser.add_argument('--refresh', action='store_true', help='Ignore cached report')
    report_parser.add_argument('--out', help='Output JSON file')

    # Export command
    export_parser = subparsers.add_parser('export', help='Export analysis results')
    export_parser.add_argument('--in', dest='input_file', required=True, help='Input JSON file')
    export_parser.add_argument('--out', dest='output', help='Output file (optional)')
    export_parser.add_argument('--pretty', action='store_true', help='Pretty print to stdout')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging()

    commands = {
        'aggregate': cmd_aggregate,
        'summarize': cmd_summarize,
        'report': cmd_report,
        'export': cmd_export,
    }

    try:
        commands[args.command](args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
