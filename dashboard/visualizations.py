from __future__ import annotations

from datetime import date

from dashboard.constants import DEFAULT_HABIT_COLOR, REMAINING_COLOR


def completion_slices(stat):
    completed = int(stat.get("completed_count", 0) or 0)
    eligible = int(stat.get("eligible_count", 0) or 0)
    # Remaining is measured against scheduled days, never the raw window size.
    remaining = max(0, eligible - completed)
    color = stat.get("color") or DEFAULT_HABIT_COLOR
    return ["Done", "Remaining"], [completed, remaining], [color, REMAINING_COLOR]


def completion_label(stat):
    completed = int(stat.get("completed_count", 0) or 0)
    eligible = int(stat.get("eligible_count", 0) or 0)
    if eligible <= 0:
        return f"{completed} / {eligible}"
    percent = round(completed / eligible * 100)
    return f"{completed} / {eligible} ({percent}%)"


def completion_pie(stat, height=140):
    import plotly.graph_objects as go

    labels, values, colors = completion_slices(stat)
    if sum(values) == 0:
        values = [0, 1]
    fig = go.Figure(
        data=go.Pie(
            labels=labels,
            values=values,
            marker=dict(colors=colors, line=dict(color=colors[0], width=1)),
            sort=False,
            textinfo="none",
            hovertemplate="%{label}: %{value} (%{percent})<extra></extra>",
        )
    )
    fig.update_layout(
        height=height,
        showlegend=False,
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=4, r=4, t=4, b=4),
    )
    return fig


def tracker_day_label(day_iso):
    return str(date.fromisoformat(day_iso).day)
