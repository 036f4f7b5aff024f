"""
Plotly figures for packed pallets and crates and for the shipment weight breakdown.

The container figure is illustrative only: boxes are laid out in simple rows
on the deck so that a planner can eyeball the load, not as a placement plan.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, NamedTuple, Tuple

import plotly.graph_objects as go
import plotly.io as pio
from plotly.colors import qualitative

from artpack.models.box import PackedBox
from artpack.models.container import Container
from artpack.models.plan import PackingPlan

DEFAULT_COLOR_SEQUENCE = qualitative.Light24

# corner indices of a prism, bottom ring then top ring
_EDGES = [(0, 1), (1, 2), (2, 3), (3, 0), (4, 5), (5, 6), (6, 7), (7, 4), (0, 4), (1, 5), (2, 6), (3, 7)]

_SCENE_AXIS = dict(backgroundcolor="#f2f5fb", gridcolor="#cbd5e0", zerolinecolor="#a0aec0")


class BoxPlacement(NamedTuple):
    box: PackedBox
    x: float
    y: float
    z: float
    dx: float
    dy: float
    dz: float


def _prism_vertices(
    x: float, y: float, z: float, dx: float, dy: float, dz: float
) -> Tuple[List[float], List[float], List[float]]:
    xs = [x, x + dx, x + dx, x, x, x + dx, x + dx, x]
    ys = [y, y, y + dy, y + dy, y, y, y + dy, y + dy]
    zs = [z, z, z, z, z + dz, z + dz, z + dz, z + dz]
    return xs, ys, zs


def _color_for_index(index: int) -> str:
    return DEFAULT_COLOR_SEQUENCE[index % len(DEFAULT_COLOR_SEQUENCE)]


def _box_mesh(placement: BoxPlacement, color: str) -> go.Mesh3d:
    xs, ys, zs = _prism_vertices(*placement[1:])
    box = placement.box
    return go.Mesh3d(
        x=xs,
        y=ys,
        z=zs,
        # two triangles per face: bottom, top, front, back, left, right
        i=[0, 0, 4, 4, 0, 0, 3, 3, 0, 0, 1, 1],
        j=[1, 2, 5, 6, 1, 5, 2, 6, 3, 7, 2, 6],
        k=[2, 3, 6, 7, 5, 4, 6, 7, 7, 4, 6, 5],
        color=color,
        opacity=1.0,
        flatshading=True,
        lighting=dict(ambient=0.7, diffuse=0.9, specular=0.1),
        name=box.id,
        hovertext=f"{box.id} ({box.box_type.name}): {box.total_pieces} pcs, {box.total_weight:g} lbs",
        hoverinfo="text",
        showlegend=True,
    )


def _edge_trace(
    xs: List[float], ys: List[float], zs: List[float], color: str, name: str, width: float, showlegend: bool
) -> go.Scatter3d:
    x_coords: List[float] = []
    y_coords: List[float] = []
    z_coords: List[float] = []
    for start, end in _EDGES:
        x_coords.extend([xs[start], xs[end], None])
        y_coords.extend([ys[start], ys[end], None])
        z_coords.extend([zs[start], zs[end], None])

    return go.Scatter3d(
        x=x_coords,
        y=y_coords,
        z=z_coords,
        mode="lines",
        line=dict(color=color, width=width),
        name=name,
        showlegend=showlegend,
        hoverinfo="skip",
    )


def shelf_layout(container: Container) -> List[BoxPlacement]:
    """
    Stand boxes on the deck in rows along the container length.

    A new row starts when the next box would overrun the deck length. Rows
    may overrun the deck width because the consolidator budgets deck area
    rather than exact positions.
    """
    placements: List[BoxPlacement] = []
    deck_length = container.container_type.length
    base = container.container_type.base_height
    x = y = row_depth = 0.0
    for box in container.boxes:
        length, width = max(box.length, box.width), min(box.length, box.width)
        if x > 0 and x + length > deck_length:
            x = 0.0
            y += row_depth
            row_depth = 0.0
        placements.append(BoxPlacement(box, x, y, base, length, width, box.height))
        x += length
        row_depth = max(row_depth, width)
    return placements


def container_layout_figure(container: Container) -> go.Figure:
    container_type = container.container_type
    fig = go.Figure()
    deck = _prism_vertices(0, 0, 0, container_type.length, container_type.width, container_type.base_height)
    fig.add_trace(_edge_trace(*deck, color="#8b5e34", name=f"{container_type.name} deck", width=3, showlegend=True))
    envelope = _prism_vertices(
        0, 0, 0, container_type.length, container_type.width, container_type.base_height + container_type.max_load_height
    )
    fig.add_trace(_edge_trace(*envelope, color="#2d3748", name=f"{container_type.name} envelope", width=4, showlegend=True))

    for index, placement in enumerate(shelf_layout(container)):
        fig.add_trace(_box_mesh(placement, _color_for_index(index)))
        fig.add_trace(
            _edge_trace(*_prism_vertices(*placement[1:]), color="#000000", name=placement.box.id, width=2.5, showlegend=False)
        )

    fig.update_layout(
        title=f"{container.id}: {container_type.name} ({container.total_weight:g} lbs)",
        scene=dict(
            xaxis_title="Length (in)",
            yaxis_title="Width (in)",
            zaxis_title="Height (in)",
            aspectmode="data",
            xaxis=_SCENE_AXIS,
            yaxis=_SCENE_AXIS,
            zaxis=_SCENE_AXIS,
        ),
        paper_bgcolor="#f7f9fc",
        plot_bgcolor="#f7f9fc",
        legend=dict(bgcolor="rgba(255,255,255,0.8)", bordercolor="#cbd5e0", borderwidth=1),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def weight_summary_figure(plan: PackingPlan) -> go.Figure:
    weights = plan.weight_summary
    labels = ["Artwork", "Box tare", "Container tare", "Manual handling"]
    values = [
        weights.artwork_weight,
        weights.box_tare_weight,
        weights.container_tare_weight,
        weights.manual_handling_weight,
    ]
    fig = go.Figure(
        go.Bar(
            x=labels,
            y=values,
            marker_color=[_color_for_index(index) for index in range(len(labels))],
            text=[f"{value:,.1f}" for value in values],
            textposition="outside",
        )
    )
    fig.update_layout(
        title=f"Shipment weight {weights.shipment_weight:,.1f} lbs",
        yaxis_title="Weight (lbs)",
        paper_bgcolor="#f7f9fc",
        plot_bgcolor="#f7f9fc",
        margin=dict(l=40, r=20, t=50, b=40),
    )
    return fig


def save_figure_image(fig: go.Figure, output_path: str | Path, width: int = 900, height: int = 650) -> None:
    """
    Persist a figure to disk as a static PNG using Kaleido.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pio.write_image(fig, str(output_path), format="png", width=width, height=height, scale=2)
