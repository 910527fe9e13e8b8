"""Report rendering for Kanban Metrics.

Renders overall and per-team metrics, timeseries analysis and ticket
details as a text table, CSV or JSON, and draws the weekly throughput chart.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from scipy import stats

from .calculators.throughput import weekly_counts
from .common_constants import OUTPUT_FORMATS

logger = logging.getLogger(__name__)

METRIC_ROWS = [
    ("Total issues", ("total_issues",)),
    ("Completed", ("completed_issues",)),
    ("In progress", ("in_progress_issues",)),
    ("Backlog", ("backlog_issues",)),
    ("Cycle time average (days)", ("cycle_time", "average")),
    ("Cycle time median (days)", ("cycle_time", "median")),
    ("Cycle time 95th percentile (days)", ("cycle_time", "p95")),
    ("Lead time average (days)", ("lead_time", "average")),
    ("Lead time median (days)", ("lead_time", "median")),
    ("Lead time 95th percentile (days)", ("lead_time", "p95")),
    ("Weekly throughput (average)", ("throughput", "weekly_avg")),
    ("Total completed", ("throughput", "total_completed")),
    ("Flow efficiency (%)", ("flow_efficiency",)),
]

TEAM_COLUMNS = [
    ("Team", None),
    ("Total", ("total_issues",)),
    ("Completed", ("completed_issues",)),
    ("In progress", ("in_progress_issues",)),
    ("Backlog", ("backlog_issues",)),
    ("Cycle time avg", ("cycle_time", "average")),
    ("Lead time avg", ("lead_time", "average")),
    ("Weekly throughput", ("throughput", "weekly_avg")),
    ("Flow efficiency (%)", ("flow_efficiency",)),
]

TICKET_COLUMNS = [
    ("ID", "identifier"),
    ("Title", "title"),
    ("State", "state"),
    ("Team", "team"),
    ("Assignee", "assignee"),
    ("Priority", "priority"),
    ("Estimate", "estimate"),
    ("Created", "createdAt"),
    ("Started", "startedAt"),
    ("Completed", "completedAt"),
    ("Cycle time (days)", "cycle_time_days"),
    ("Lead time (days)", "lead_time_days"),
]


@dataclass
class ReportData:
    """Everything a report can show. Only `metrics` is required."""

    metrics: Dict[str, Any]
    team_metrics: Optional[Dict[str, Dict[str, Any]]] = None
    timeseries: Any = None
    issues: Optional[List[Any]] = None


def _lookup(metrics, path):
    value = metrics
    for key in path:
        value = value[key]
    return value


def metrics_frame(metrics):
    """Overall metrics as a two-column DataFrame."""
    return pd.DataFrame(
        [(label, _lookup(metrics, path)) for label, path in METRIC_ROWS],
        columns=["Metric", "Value"],
    )


def team_metrics_frame(team_metrics):
    """One row per team."""
    rows = [
        [team] + [_lookup(metrics, path) for _, path in TEAM_COLUMNS[1:]]
        for team, metrics in sorted(team_metrics.items())
    ]
    return pd.DataFrame(rows, columns=[label for label, _ in TEAM_COLUMNS])


def tickets_frame(issues):
    """One row per issue with its detail fields."""
    rows = []
    for issue in issues:
        details = issue.to_dict()
        details["state"] = details["state"]["name"]
        rows.append([details[key] for _, key in TICKET_COLUMNS])
    return pd.DataFrame(rows, columns=[label for label, _ in TICKET_COLUMNS])


def render_table(report_data):
    """Render the report as plain-text tables."""
    sections = [
        "Kanban metrics",
        metrics_frame(report_data.metrics).to_string(index=False),
    ]

    if report_data.team_metrics:
        sections += [
            "Team metrics",
            team_metrics_frame(report_data.team_metrics).to_string(index=False),
        ]

    if report_data.timeseries is not None:
        flow = report_data.timeseries.status_flow_analysis()
        time_in_status = report_data.timeseries.average_time_in_status()
        if flow:
            sections += [
                "Status transitions",
                pd.Series(flow, name="count")
                .rename_axis("Transition")
                .reset_index()
                .to_string(index=False),
            ]
        if time_in_status:
            sections += [
                "Average time in status (days)",
                pd.Series(time_in_status, name="days")
                .rename_axis("Status")
                .reset_index()
                .to_string(index=False),
            ]

    if report_data.issues:
        sections += [
            "Individual tickets",
            tickets_frame(report_data.issues).to_string(index=False, na_rep="N/A"),
        ]

    return "\n\n".join(sections)


def render_csv(report_data):
    """Render the report as CSV sections separated by blank lines."""
    sections = [metrics_frame(report_data.metrics).to_csv(index=False)]

    if report_data.team_metrics:
        sections.append(
            team_metrics_frame(report_data.team_metrics).to_csv(index=False)
        )

    if report_data.issues:
        sections.append(tickets_frame(report_data.issues).to_csv(index=False))

    return "\n".join(sections)


def render_json(report_data):
    """Render the report as pretty-printed JSON."""
    output = {"overall_metrics": report_data.metrics}

    if report_data.team_metrics is not None:
        output["team_metrics"] = report_data.team_metrics

    if report_data.timeseries is not None:
        output["timeseries"] = {
            "status_flow_analysis": report_data.timeseries.status_flow_analysis(),
            "average_time_in_status": report_data.timeseries.average_time_in_status(),
            "daily_status_counts": report_data.timeseries.daily_status_counts(),
        }

    if report_data.issues:
        output["individual_tickets"] = [i.to_dict() for i in report_data.issues]

    return json.dumps(output, indent=2, ensure_ascii=False)


RENDERERS = {
    "table": render_table,
    "csv": render_csv,
    "json": render_json,
}


def render_report(report_data, fmt="table"):
    """Render `report_data` in one of OUTPUT_FORMATS."""
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output format `{fmt}`; "
            f"expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    return RENDERERS[fmt](report_data)


def set_chart_style(style="whitegrid", despine=True):
    """Set seaborn chart style."""
    sns.set_style(style)
    if despine:
        sns.despine()


def write_throughput_chart(completed_issues, output_file, title=None):
    """Draw completed issues per week with a linear trend line.

    Returns False, without writing a file, when there is nothing to draw.
    """
    chart_data = weekly_counts(completed_issues).to_frame()

    if len(chart_data.index) == 0:
        logger.warning("Cannot draw throughput chart with no completed items")
        return False

    chart_data["position"] = range(len(chart_data.index))
    if len(chart_data.index) > 1:
        slope, intercept, _, _, _ = stats.linregress(
            chart_data["position"], chart_data["count"]
        )
        chart_data["fitted"] = slope * chart_data["position"] + intercept

    fig, ax = plt.subplots()

    if title:
        ax.set_title(title)

    ax.set_xlabel("Week")
    ax.set_ylabel("Number of items")

    ax.plot(chart_data["position"], chart_data["count"], marker="o")
    ax.set_xticks(list(chart_data["position"]))
    ax.set_xticklabels(list(chart_data.index), rotation=70, size="small")

    _, top = ax.get_ylim()
    ax.set_ylim(0, top + 1)

    for x, y in zip(chart_data["position"], chart_data["count"]):
        ax.annotate(
            f"{y:.0f}",
            xy=(x, y + 0.2),
            ha="center",
            va="bottom",
            fontsize="x-small",
        )

    if "fitted" in chart_data.columns:
        ax.plot(chart_data["position"], chart_data["fitted"], "--", linewidth=2)

    set_chart_style()

    logger.info("Writing throughput chart to %s", output_file)
    try:
        fig.savefig(output_file, bbox_inches="tight", dpi=300)
    finally:
        plt.close(fig)
    return True
