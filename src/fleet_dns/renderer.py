"""Render the change summary via Jinja2 templates."""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined

from .models import ReconcileResult, ReportRow

COLUMNS = ("zone", "name", "type", "ttl", "values")


def _row_to_template_data(row: ReportRow) -> dict[str, str]:
    """Convert a report row into template-friendly strings."""
    return {
        "zone": row.zone,
        "name": row.name,
        "type": row.type,
        "ttl": str(row.ttl),
        "values": ", ".join(row.values),
    }


def _column_widths(rows: list[dict[str, str]]) -> dict[str, int]:
    """Return the width of each column, header included."""
    widths = {column: len(column) for column in COLUMNS}
    for row in rows:
        for column in COLUMNS:
            widths[column] = max(widths[column], len(row[column]))
    return widths


def render_summary(result: ReconcileResult, template_name: str = "summary.j2") -> str:
    """Render the surviving mutations as a table; empty when there are none."""
    if not result.has_changes():
        return ""
    env = Environment(
        loader=PackageLoader("fleet_dns", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(template_name)
    rows = [_row_to_template_data(row) for row in result.rows()]
    text = template.render(
        rows=rows,
        widths=_column_widths(rows),
        total=result.total(),
        zones=sum(1 for mutations in result.changes.values() if mutations),
        dry_run=result.dry_run,
    )
    return text.strip() + "\n"
