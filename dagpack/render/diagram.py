"""DAG view: styled Mermaid text handed to the external layout engine."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime
import re
from typing import Mapping

from dagpack.core.models import Block
from dagpack.core.types import BlockState
from dagpack.snapshot import THEME_PREAMBLE, extract_diagram_body, parse_blocks, parse_timestamp
from dagpack.staleness import DEFAULT_STALE_AFTER_SECONDS, is_stale, status_age, utc_now

CLS_SUCCESS = "success"
CLS_FAILED = "failed"

_FILL_RE = re.compile(r"fill:#([a-fA-F0-9]{3,6})")
_COLOR_RE = re.compile(r"color:#([a-fA-F0-9]{3,6})")
_NODE_ID_RE = re.compile(r"(?<![\w:])(\w+)(?:\[[^\]]*\]|\([^)]*\)|\{[^}]*\})", re.ASCII)
_SPINNER_POSITIONS = (
    (12, 5), (17, 7), (19, 12), (17, 17),
    (12, 19), (7, 17), (5, 12), (7, 7),
)


@dataclass(frozen=True, slots=True)
class ThemeConfig:
    """Mermaid ``classDef`` styles for fresh and stale status."""

    default_style: str = "fill:#4472C4,stroke:#ffffff,stroke-width:1px,color:#fff"
    success_style: str = "stroke:#28a745,stroke-width:3px"
    failed_style: str = "stroke:#dc3545,stroke-width:3px"
    stale_default_style: str = "fill:#f3f4f6,stroke:#9ca3af,stroke-width:2px,color:#6b7280"
    stale_success_style: str = "fill:#f3f4f6,stroke:#9ca3af,stroke-width:2px,color:#6b7280"
    stale_failed_style: str = "fill:#f3f4f6,stroke:#d1d5db,stroke-width:2px,color:#6b7280"


@dataclass(frozen=True, slots=True)
class BlockPresentation:
    css_class: str | None
    spinner: bool


def presentation_for(state: BlockState, *, stale: bool) -> BlockPresentation:
    """The single place where a block state turns into visual treatment."""
    if state is BlockState.WAITING:
        return BlockPresentation(css_class=None, spinner=False)
    if state is BlockState.RUNNING:
        return BlockPresentation(css_class=None, spinner=not stale)
    if state is BlockState.SUCCESS:
        return BlockPresentation(css_class=CLS_SUCCESS, spinner=False)
    if state is BlockState.FAILED:
        return BlockPresentation(css_class=CLS_FAILED, spinner=False)
    raise ValueError(f"Unsupported block state: {state!r}")


def resolve_block(blocks: Mapping[str, Block], block_id: str) -> Block:
    """Block as reported, or ``Waiting`` with no runtime when never mentioned."""
    block = blocks.get(block_id)
    if block is None:
        return Block(id=block_id)
    return block


def diagram_node_ids(diagram_text: str) -> tuple[str, ...]:
    """Node ids declared with a ``[``, ``(`` or ``{`` shape, in first-seen order."""
    seen: dict[str, None] = {}
    for match in _NODE_ID_RE.finditer(diagram_text):
        seen.setdefault(match.group(1), None)
    return tuple(seen)


def resolve_blocks(raw: str) -> dict[str, Block]:
    """Every diagram node and every reported block, with defaults applied."""
    reported = parse_blocks(raw)
    resolved = {
        block_id: resolve_block(reported, block_id)
        for block_id in diagram_node_ids(extract_diagram_body(raw))
    }
    for block_id, block in reported.items():
        resolved.setdefault(block_id, block)
    return resolved


def extract_colors(style: str) -> tuple[str, str]:
    """Fill and text colours of a CSS-like style string, with Mermaid fallbacks."""
    fill = _FILL_RE.search(style)
    color = _COLOR_RE.search(style)
    return (
        f"#{fill.group(1)}" if fill else "#4472C4",
        f"#{color.group(1)}" if color else "#fff",
    )


def add_front_matter(raw: str, theme: ThemeConfig | None = None) -> str:
    body = extract_diagram_body(raw)
    if THEME_PREAMBLE in body:
        return body
    fill_color, text_color = extract_colors((theme or ThemeConfig()).default_style)
    preamble = (
        "---\n"
        "config:\n"
        "  theme: 'base'\n"
        "  themeVariables:\n"
        f"    primaryColor: '{fill_color}'\n"
        f"    primaryTextColor: '{text_color}'\n"
        "---\n\n"
    )
    return preamble + body


def spinner_data_url(color: str) -> str:
    dot_classes = "\n".join(
        f".dot{index + 1} {{ animation: fade 1.0s linear infinite {index * 0.125}s; }}"
        for index in range(len(_SPINNER_POSITIONS))
    )
    circles = "\n".join(
        f'<circle cx="{cx}" cy="{cy}" r="2" fill="{color}" class="dot{index + 1}"/>'
        for index, (cx, cy) in enumerate(_SPINNER_POSITIONS)
    )
    svg = (
        '<svg width="24" height="24" viewBox="0 0 24 24" xmlns="http://www.w3.org/2000/svg">'
        f"<style>{dot_classes}\n"
        "@keyframes fade { 0% { opacity: 1; } 12.5% { opacity: 0.8; } 25% { opacity: 0.6; } "
        "37.5% { opacity: 0.4; } 50%, 100% { opacity: 0.3; } }"
        f"</style>{circles}</svg>"
    )
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")


def style_node(diagram: str, block_id: str, *, label_prefix: str = "", suffix: str = "") -> str:
    """Rewrite ``id[label]`` and ``id(label)`` shapes of one node."""
    escaped = re.escape(block_id)

    def _replace(match: re.Match[str]) -> str:
        return f"{match.group(1)}{label_prefix}{match.group(2)}{match.group(3)}{suffix}"

    diagram = re.sub(rf"(\b{escaped}\[)([^\]]+)(\])", _replace, diagram)
    return re.sub(rf"(\b{escaped}\()([^\)]+)(\))", _replace, diagram)


def style_diagram(
    raw: str,
    theme: ThemeConfig | None = None,
    *,
    now: datetime | None = None,
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
) -> str:
    """Mermaid text with state classes, running spinners and ``classDef`` lines."""
    theme = theme or ThemeConfig()
    age = status_age(parse_timestamp(raw), now if now is not None else utc_now())
    stale = is_stale(age, stale_after_seconds)
    _fill_color, text_color = extract_colors(theme.default_style)

    diagram = add_front_matter(raw, theme)
    for block_id, block in parse_blocks(raw).items():
        presentation = presentation_for(block.state, stale=stale)
        if presentation.spinner:
            spinner = f"<img src='{spinner_data_url(text_color)}' height='25'/>"
            diagram = style_node(diagram, block_id, label_prefix=spinner)
        if presentation.css_class is not None:
            diagram = style_node(diagram, block_id, suffix=f":::{presentation.css_class}")

    if stale:
        default_style = theme.stale_default_style
        success_style = theme.stale_success_style
        failed_style = theme.stale_failed_style
    else:
        default_style = theme.default_style
        success_style = theme.success_style
        failed_style = theme.failed_style

    return (
        diagram
        + "\n\n"
        + f"classDef default {default_style}\n"
        + f"classDef {CLS_SUCCESS} {success_style}\n"
        + f"classDef {CLS_FAILED} {failed_style}"
    )
