"""
ROI Visualizations

Plotly charts for a calculation result.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import plotly.graph_objects as go

from roi_engine.models import CATEGORY_ORDER, CalculationResult
from roi_io.writers import CATEGORY_LABELS


def payback_crossing(result: CalculationResult) -> Optional[float]:
    """
    Month at which the cumulative ROI line crosses zero, interpolated
    linearly between the surrounding points.
    """
    months = np.array([p.month for p in result.monthly], dtype=float)
    roi = np.array([p.roi for p in result.monthly], dtype=float)
    if roi.size == 0:
        return None
    non_negative = np.flatnonzero(roi >= 0)
    if non_negative.size == 0:
        return None
    idx = int(non_negative[0])
    if idx == 0:
        return float(months[0])
    m0, m1 = months[idx - 1], months[idx]
    r0, r1 = roi[idx - 1], roi[idx]
    return float(np.interp(0.0, [r0, r1], [m0, m1]))


def create_roi_timeline(result: CalculationResult) -> go.Figure:
    """
    Create cumulative ROI line chart.

    Shows the monthly series against a zero line and marks the payback point.
    """
    months = [p.month for p in result.monthly]
    roi = [p.roi for p in result.monthly]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        name="Cumulative ROI",
        x=months,
        y=roi,
        mode="lines+markers",
        line={"color": "#2E86AB", "width": 3},
    ))
    fig.add_hline(y=0, line_dash="dash", line_color="rgb(63, 63, 63)")

    crossing = payback_crossing(result)
    if crossing is not None:
        fig.add_vline(
            x=crossing,
            line_dash="dot",
            line_color="#44AF69",
            annotation_text=f"Payback ≈ month {crossing:.1f}",
        )

    fig.update_layout(
        title="Cumulative ROI",
        xaxis_title="Month",
        yaxis_title="Cumulative ROI ($)",
        template="plotly_white",
        height=500,
    )

    return fig


def create_breakdown_chart(result: CalculationResult) -> go.Figure:
    """
    Create annual savings bar chart by category.
    """
    labels = [CATEGORY_LABELS[c] for c in CATEGORY_ORDER]
    dollars = [result.breakdown[c].dollars_saved for c in CATEGORY_ORDER]

    fig = go.Figure(go.Bar(
        x=labels,
        y=dollars,
        marker_color="#2E86AB",
        text=[f"{v:,.0f}" for v in dollars],
        textposition="outside",
    ))
    fig.update_layout(
        title="Annual Savings by Category",
        showlegend=False,
        yaxis_title="Dollars Saved",
        template="plotly_white",
        height=500,
    )

    return fig


def save_charts(
    result: CalculationResult,
    output_dir: str | Path,
    format: str = "html",
) -> list[Path]:
    """
    Generate and save all charts.

    Args:
        result: Calculation result
        output_dir: Directory to save charts
        format: Output format ("html", "png", "svg")

    Returns:
        List of created file paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    charts = {
        "roi_timeline": create_roi_timeline(result),
        "savings_breakdown": create_breakdown_chart(result),
    }

    created_files = []
    for name, fig in charts.items():
        file_path = output_dir / f"{name}.{format}"
        if format == "html":
            fig.write_html(str(file_path))
        else:
            fig.write_image(str(file_path))
        created_files.append(file_path)

    return created_files


def show_charts(result: CalculationResult) -> None:
    """
    Display all charts (opens in browser).
    """
    for chart in (create_roi_timeline(result), create_breakdown_chart(result)):
        chart.show()
