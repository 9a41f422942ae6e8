"""Command-line interface for the structured data analyzer."""

import json
import sys
from typing import Optional, Tuple

from structdata.config import AnalysisThresholds, settings
from structdata.constants import FORMAT_DISPLAY_NAMES
from structdata.exceptions import FetchError
from structdata.fetcher import PageFetcher
from structdata.logging_config import setup_logging
from structdata.models import AnalysisOutcome
from structdata.structured_data import StructuredDataAnalyzer
from structdata.utils import is_absolute_url

IMPORTANCE_ICONS = {'high': '🔴', 'medium': '🟡', 'low': '🔵'}


def load_source(source: str, base_url: Optional[str] = None) -> Tuple[bytes, str]:
    """Read the page to analyze.

    Args:
        source: http(s) URL, file path, or "-" for stdin
        base_url: Base URL override for relative links

    Returns:
        (page content, base URL to resolve links against)

    Raises:
        FetchError: If a URL could not be downloaded
        OSError: If a file could not be read
    """
    if source == "-":
        return sys.stdin.buffer.read(), base_url or ""

    if is_absolute_url(source):
        page = PageFetcher().fetch(source)
        return page.html.encode("utf-8"), base_url or page.url

    with open(source, "rb") as f:
        return f.read(), base_url or ""


def print_analysis(source: str, outcome: AnalysisOutcome):
    """Print an analysis in a formatted way.

    Args:
        source: The analyzed URL or path
        outcome: AnalysisOutcome from StructuredDataAnalyzer.analyze()
    """
    result = outcome.details

    print(f"\n{'=' * 60}")
    print(f"Structured Data Analysis for: {source}")
    print(f"{'=' * 60}")

    if result.error:
        print(f"\n❌ Analysis failed: {result.error}")
        print(f"\n{'=' * 60}\n")
        return

    print(f"\n📊 Overall Score: {outcome.score}/100")

    if not result.has_structured_data:
        print("\nNo structured data found.")
    else:
        print(f"\nFormats:")
        for format_name, summary in result.formats.items():
            if not summary.found:
                continue
            label = FORMAT_DISPLAY_NAMES.get(format_name, format_name)
            line = f"  • {label}: {summary.items} item(s)"
            if summary.parse_errors:
                line += f", {summary.parse_errors} parse error(s)"
            print(line)

        if result.schema_types:
            print(f"\nSchema Types:")
            for schema_type, stat in sorted(result.schema_types.items()):
                nested = f" ({stat.nested} nested)" if stat.nested else ""
                print(f"  • {schema_type}: {stat.total}{nested}")

        print(f"\nIssues:")
        print(f"  • Errors: {result.error_count}")
        print(f"  • Warnings: {result.warning_count}")
        special = result.special_validation
        if special.validated_items:
            print(f"  • Rich result checks passed: {special.valid_items}/{special.validated_items}")

        if result.validation.errors:
            print(f"\n⚠️  Errors:")
            for issue in result.validation.errors:
                where = f" [{issue.path}]" if issue.path else ""
                print(f"  • {issue.message}{where}")

    if result.recommendations:
        print(f"\n💡 Recommendations:")
        for rec in result.recommendations:
            icon = IMPORTANCE_ICONS.get(rec.importance, '•')
            print(f"  {icon} {rec.message}")

    print(f"\n{'=' * 60}\n")


def analyze_command(args) -> int:
    """Analyze a page for structured data."""
    if args.thresholds:
        thresholds = AnalysisThresholds.from_file(args.thresholds)
    else:
        thresholds = AnalysisThresholds.from_env()

    try:
        content, base_url = load_source(args.source, args.base_url)
    except FetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot read {args.source}: {e}", file=sys.stderr)
        return 1

    analyzer = StructuredDataAnalyzer(thresholds=thresholds)

    if args.seo:
        projection = analyzer.provide_seo_data(content, base_url)
        print(json.dumps(projection.to_dict(), indent=2, default=str))
        return 1 if projection.error else 0

    outcome = analyzer.analyze(content, base_url)
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, default=str))
    else:
        print_analysis(args.source, outcome)

    return 1 if outcome.details.error else 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Structured Data Analyzer - Detect, validate and score JSON-LD, Microdata and RDFa"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help=f"Set logging verbosity (default: {settings.LOG_LEVEL})",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze the structured data of one page."
    )
    analyze_parser.add_argument(
        "source", help="http(s) URL, path to an HTML file, or - for stdin"
    )
    analyze_parser.add_argument(
        "--base-url",
        help="Base URL for resolving relative links (defaults to the fetched URL)",
    )
    output_group = analyze_parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON",
    )
    output_group.add_argument(
        "--seo",
        action="store_true",
        help="Print the reduced SEO projection as JSON",
    )
    analyze_parser.add_argument(
        "--thresholds",
        help="JSON file with analysis thresholds",
    )
    analyze_parser.set_defaults(func=analyze_command)

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level or settings.LOG_LEVEL,
        log_file=args.log_file or settings.LOG_FILE,
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
