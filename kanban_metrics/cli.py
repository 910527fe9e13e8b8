import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from .calculators.kanban import MetricsEngine
from .calculators.partitioner import IssuePartitioner
from .calculators.timeseries import TicketTimeseries, find_issue, format_timeline
from .common_constants import API_TOKEN_ENV_KEY, OUTPUT_FORMATS
from .config import ConfigError, config_to_options, create_default_options
from .config.type_utils import force_date_string
from .linear import create_pipeline
from .query_options import QueryOptions
from .reports import ReportData, render_report, write_throughput_chart
from .utils import set_chart_context

load_dotenv()

logger = logging.getLogger(__name__)


def _date_argument(value):
    try:
        return force_date_string("date", value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        description="Fetch issues from Linear and produce Kanban flow metrics."
    )

    # Basic options
    parser.add_argument(
        "config", metavar="config.yml", nargs="?", help="Configuration file"
    )
    parser.add_argument(
        "-v", dest="verbose", action="store_true", help="Verbose output"
    )
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )

    # Query options
    parser.add_argument("--team-id", metavar="ROI", help="Linear team UUID or key")
    parser.add_argument(
        "--start-date",
        metavar="YYYY-MM-DD",
        type=_date_argument,
        help="Only include issues updated on or after this date",
    )
    parser.add_argument(
        "--end-date",
        metavar="YYYY-MM-DD",
        type=_date_argument,
        help="Only include issues updated on or before this date",
    )
    parser.add_argument(
        "--page-size", metavar="N", type=int, help="Issues per page (1-250)"
    )
    parser.add_argument(
        "--include-archived",
        action="store_true",
        default=None,
        help="Include archived issues",
    )

    # Cache options
    parser.add_argument(
        "--no-cache",
        action="store_true",
        default=None,
        help="Always fetch from the API, ignoring and not writing the cache",
    )
    parser.add_argument(
        "--cache-dir", metavar="tmp/.linear_cache", help="Cache directory"
    )

    # Output options
    parser.add_argument(
        "--format", choices=OUTPUT_FORMATS, help="Output format (default: table)"
    )
    parser.add_argument(
        "--team-metrics",
        action="store_true",
        default=None,
        help="Include per-team metrics",
    )
    parser.add_argument(
        "--ticket-details",
        action="store_true",
        default=None,
        help="Include one row per ticket",
    )
    parser.add_argument(
        "--timeseries",
        action="store_true",
        default=None,
        help="Include status flow and time-in-status analysis",
    )
    parser.add_argument(
        "--timeline",
        metavar="ROI-123",
        help="Print the timeline of a single issue and exit",
    )
    parser.add_argument(
        "--throughput-chart",
        metavar="throughput.png",
        help="Write a weekly throughput chart to this file",
    )
    parser.add_argument(
        "--output-directory",
        "-o",
        metavar="metrics",
        help="Write chart files to this directory rather than the current one",
    )

    return parser


def main():
    parser = configure_argument_parser()
    args = parser.parse_args()
    sys.exit(run_command_line(parser, args))


def run_command_line(parser, args):
    """Run the metrics report for parsed `args` and return an exit status."""

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    # Configuration and settings
    # (command line arguments override config file options)

    options = load_options(args)
    if options is None:
        return 1

    override_options(options["connection"], args)
    override_options(options["settings"], args)
    settings = options["settings"]

    api_token = os.environ.get(API_TOKEN_ENV_KEY)
    if not api_token:
        logger.error(
            "%s is not set. Export it or add it to a .env file.", API_TOKEN_ENV_KEY
        )
        return 1

    pipeline = create_pipeline(api_token, settings, options["connection"])
    query_options = QueryOptions.from_dict(settings)
    logger.info("Fetching issues with %s", query_options.to_dict())
    result = pipeline.fetch_result(query_options)

    if not result.ok:
        logger.error("Could not fetch issues from Linear")
        return 1
    if not result.issues:
        logger.error("No issues found for the given filters")
        return 1
    if result.truncated:
        logger.warning("Results were truncated by the page limit")

    issues = result.issues

    if args.timeline:
        issue = find_issue(issues, args.timeline)
        if issue is None:
            logger.error("Issue %s not found", args.timeline)
            return 1
        print(format_timeline(issue))
        return 0

    logger.info("Calculating metrics for %d issues", len(issues))
    engine = MetricsEngine()
    report_data = ReportData(
        metrics=engine.overall(issues),
        team_metrics=engine.by_team(issues) if settings["team_metrics"] else None,
        timeseries=TicketTimeseries(issues) if settings["timeseries"] else None,
        issues=issues if settings["ticket_details"] else None,
    )
    print(render_report(report_data, settings["format"]))

    if settings["throughput_chart"]:
        # Set charting context, which determines how charts are rendered
        set_chart_context("paper")
        completed, _, _ = IssuePartitioner.partition(issues)
        write_throughput_chart(
            completed,
            chart_path(options, args, settings["throughput_chart"]),
            title=settings["throughput_chart_title"],
        )

    return 0


def load_options(args):
    """Return options from the config file, or defaults when there is none.

    Returns None, after logging the reason, if the file cannot be used.
    """
    if not args.config:
        return create_default_options()

    logger.debug("Parsing options from %s", args.config)
    try:
        with open(args.config, encoding="utf-8") as config:
            return config_to_options(
                config.read(), cwd=os.path.dirname(os.path.abspath(args.config))
            )
    except FileNotFoundError:
        logger.error("Configuration file '%s' not found", args.config)
    except ConfigError as e:
        logger.error("Invalid configuration file '%s': %s", args.config, e)
    return None


def chart_path(options, args, filename):
    """Place `filename` in the output directory, if one is configured."""
    output_dir = args.output_directory or options.get("output_directory")
    if not output_dir:
        return filename

    logger.info("Writing charts to %s", output_dir)
    os.makedirs(output_dir, exist_ok=True)
    return os.path.join(output_dir, filename)


def override_options(options, arguments):
    """Update `options` dict with settings from `arguments`
    with the same key.
    """
    for key in options.keys():
        if getattr(arguments, key, None) is not None:
            options[key] = getattr(arguments, key)


if __name__ == "__main__":
    main()
