"""Consumer-side presentation for DagKit front ends."""

from dagpack.render.diagram import (
    CLS_FAILED,
    CLS_SUCCESS,
    BlockPresentation,
    ThemeConfig,
    add_front_matter,
    diagram_node_ids,
    extract_colors,
    presentation_for,
    resolve_block,
    resolve_blocks,
    spinner_data_url,
    style_diagram,
    style_node,
)
from dagpack.render.progress import (
    ProgressReport,
    compute_progress,
    format_runtime,
    render_progress_bar,
)

__all__ = [
    "CLS_FAILED",
    "CLS_SUCCESS",
    "BlockPresentation",
    "ThemeConfig",
    "add_front_matter",
    "diagram_node_ids",
    "extract_colors",
    "presentation_for",
    "resolve_block",
    "resolve_blocks",
    "spinner_data_url",
    "style_diagram",
    "style_node",
    "ProgressReport",
    "compute_progress",
    "format_runtime",
    "render_progress_bar",
]
