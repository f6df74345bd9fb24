"""
Line-chart rendering and image export for aligned series.

Figures are built with ``matplotlib.figure.Figure`` directly, without pyplot,
so rendering never touches a GUI backend or global figure state. Gaps in a
series are drawn as breaks in the line: ``None`` becomes ``NaN``, which
matplotlib does not connect across. Every observed point also gets a marker,
so a point with gaps on both sides stays visible.
"""

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
from matplotlib.figure import Figure

from runcompare import logger
from runcompare.alignment.aligner import AlignedSeriesSet
from runcompare.config.models import ChartConfig
from runcompare.exceptions import RenderError

from .colors import assign_colors


def render_figure(aligned: AlignedSeriesSet, chart_config: Optional[ChartConfig] = None) -> Figure:
    """
    Draw one line per experiment against the shared step axis.

    Args:
        aligned: Aligned series to draw
        chart_config: Size, labels and colour seed (defaults to ChartConfig())

    Returns:
        A new Figure; the caller owns it

    Raises:
        RenderError: If matplotlib rejects the data or settings (RENDER_001)
    """
    cfg = chart_config or ChartConfig()
    colors = assign_colors(aligned.experiment_ids, seed=cfg.color_seed)

    try:
        fig = Figure(figsize=(cfg.width, cfg.height), dpi=cfg.dpi)
        ax = fig.add_subplot(111)

        x = np.asarray(aligned.steps, dtype=float)
        for series in aligned.series:
            y = np.array(
                [np.nan if v is None else v for v in series.values],
                dtype=float,
            )
            ax.plot(
                x,
                y,
                label=series.experiment_id,
                color=colors[series.experiment_id],
                linewidth=cfg.line_width,
                marker="o",
                markersize=cfg.marker_size,
            )

        ax.set_title(aligned.metric)
        ax.set_xlabel(cfg.x_label)
        ax.set_ylabel(aligned.metric)
        ax.grid(True, alpha=0.3)
        if aligned.series:
            ax.legend(loc=cfg.legend_location)
        fig.tight_layout()
    except (ValueError, TypeError) as e:
        raise RenderError(
            f"Failed to render metric '{aligned.metric}': {e}",
            error_code="RENDER_001",
            context={"metric": aligned.metric},
        ) from e

    logger.debug(f"Rendered {len(aligned.series)} series for metric '{aligned.metric}'")
    return fig


def export_image(
    aligned: AlignedSeriesSet,
    chart_config: Optional[ChartConfig] = None,
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Render and encode the chart as image bytes.

    Args:
        aligned: Aligned series to draw
        chart_config: Rendering settings, including ``image_format``
        path: Optional file to also write the bytes to

    Returns:
        Encoded image

    Raises:
        RenderError: If rendering (RENDER_001) or encoding/writing (RENDER_002) fails
    """
    cfg = chart_config or ChartConfig()
    fig = render_figure(aligned, cfg)

    buffer = io.BytesIO()
    try:
        fig.savefig(buffer, format=cfg.image_format, dpi=cfg.dpi)
    except ValueError as e:
        raise RenderError(
            f"Cannot export chart as '{cfg.image_format}': {e}",
            error_code="RENDER_002",
            context={"image_format": cfg.image_format},
        ) from e
    payload = buffer.getvalue()

    if path is not None:
        path = Path(path)
        try:
            path.write_bytes(payload)
        except OSError as e:
            raise RenderError(
                f"Cannot write chart to {path}: {e}",
                error_code="RENDER_002",
                context={"path": str(path)},
            ) from e
        logger.info(f"Chart written to {path}")

    return payload
