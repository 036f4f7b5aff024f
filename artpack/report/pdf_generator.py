"""
PDF report generator using ReportLab.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from artpack.models.plan import PackingPlan


def _build_table(data: Sequence[Sequence[str]], column_widths: Sequence[float]) -> Table:
    table = Table(data, colWidths=column_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F1F1F1")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#333333")),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#DDDDDD")),
            ]
        )
    )
    return table


def _summary_table(plan: PackingPlan) -> Table:
    weights = plan.weight_summary
    metrics = plan.metrics
    rows = [
        ("Packing Strategy", plan.strategy),
        ("Total Pieces", metrics.total_pieces),
        ("Packed Pieces", metrics.packed_pieces),
        ("Manual Handling Pieces", metrics.manual_handling_pieces),
        ("Boxes", ", ".join(f"{count} {name}" for name, count in metrics.box_counts.items()) or "0"),
        ("Containers", ", ".join(f"{count} {name}" for name, count in metrics.container_counts.items()) or "0"),
        ("Artwork Weight (lbs)", f"{weights.artwork_weight:,.1f}"),
        ("Packaging Weight (lbs)", f"{weights.packaging_weight:,.1f}"),
        ("Shipment Weight (lbs)", f"{weights.shipment_weight:,.1f}"),
        ("Manual Handling Weight (lbs)", f"{weights.manual_handling_weight:,.1f}"),
        ("Avg Box Weight Utilisation (%)", f"{metrics.average_box_utilisation_pct:.2f}"),
        ("Avg Deck Area Utilisation (%)", f"{metrics.average_container_area_pct:.2f}"),
    ]
    data = [["Metric", "Value"]] + [[str(left), str(right)] for left, right in rows]
    return _build_table(data, column_widths=[80 * mm, 100 * mm])


def _boxes_table(plan: PackingPlan) -> Table:
    data = [["Box", "Type", "Dimensions (in)", "Lines", "Pieces", "Weight (lbs)"]]
    for box in plan.boxes:
        data.append(
            [
                box.id,
                box.box_type.name,
                f"{box.length:g} x {box.width:g} x {box.height:g}",
                ", ".join(str(line) for line in box.line_numbers()),
                str(box.total_pieces),
                f"{box.total_weight:,.1f}",
            ]
        )
    return _build_table(data, column_widths=[25 * mm, 40 * mm, 45 * mm, 60 * mm, 20 * mm, 30 * mm])


def _containers_table(plan: PackingPlan) -> Table:
    data = [["Container", "Kind", "Category", "Dimensions (in)", "Boxes", "Weight (lbs)"]]
    for container in plan.containers:
        data.append(
            [
                container.id,
                container.kind.title(),
                container.container_type.name,
                f"{container.length:g} x {container.width:g} x {container.height:g}",
                ", ".join(box.id for box in container.boxes),
                f"{container.total_weight:,.1f}",
            ]
        )
    return _build_table(data, column_widths=[25 * mm, 20 * mm, 35 * mm, 40 * mm, 75 * mm, 30 * mm])


def _manual_table(plan: PackingPlan, style: ParagraphStyle) -> Table:
    data = [["Line", "Tag", "Qty", "Reason", "Recommended Action"]]
    for entry in plan.manual_handling:
        data.append(
            [
                str(entry.item.line_number),
                str(entry.item.tag_number),
                str(entry.quantity),
                Paragraph(entry.reason, style),
                Paragraph(entry.recommended_action, style),
            ]
        )
    return _build_table(data, column_widths=[15 * mm, 15 * mm, 15 * mm, 95 * mm, 100 * mm])


def _cost_table(plan: PackingPlan) -> Table:
    cost = plan.cost
    rows = [
        ("Shipping", f"${cost.shipping_cost:,.2f}"),
        ("Handling", f"${cost.handling_cost:,.2f}"),
        ("Packaging", f"${cost.packaging_cost:,.2f}"),
        ("Special Fees", f"${cost.special_fees:,.2f}"),
        ("Client Multiplier", f"{cost.client_multiplier:g}"),
        ("Total", f"${cost.total_cost:,.2f}"),
        ("Cost per Pound", f"${cost.cost_per_pound:,.2f}"),
    ]
    data = [["Cost Item", "Amount"]] + [[left, right] for left, right in rows]
    return _build_table(data, column_widths=[80 * mm, 100 * mm])


def _bullets(lines: Iterable[str], style: ParagraphStyle) -> list:
    return [Paragraph(f"- {line}", style) for line in lines]


def generate_pdf_report(
    output_path: str | Path,
    plan: PackingPlan,
    layout_images: Iterable[str | Path] = (),
    title: str = "Artwork Packing Plan",
) -> Path:
    """
    Generate a packing plan PDF report and return the output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=landscape(A4),
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )

    styles = getSampleStyleSheet()
    title_style = styles["Title"]
    body_style = styles["BodyText"]
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Heading2"],
        textColor=colors.HexColor("#2D5B88"),
    )

    story: list = [
        Paragraph(title, title_style),
        Spacer(1, 8 * mm),
        Paragraph("Plan Summary", subtitle_style),
        Spacer(1, 4 * mm),
        _summary_table(plan),
        Spacer(1, 6 * mm),
        Paragraph("Boxes", subtitle_style),
        Spacer(1, 4 * mm),
        _boxes_table(plan),
        Spacer(1, 6 * mm),
        Paragraph("Pallets and Crates", subtitle_style),
        Spacer(1, 4 * mm),
        _containers_table(plan),
    ]

    if plan.manual_handling:
        story.extend(
            [
                Spacer(1, 6 * mm),
                Paragraph("Manual Handling", subtitle_style),
                Spacer(1, 4 * mm),
                _manual_table(plan, body_style),
            ]
        )

    story.extend(
        [
            Spacer(1, 6 * mm),
            Paragraph("Cost Estimate", subtitle_style),
            Spacer(1, 4 * mm),
            _cost_table(plan),
        ]
    )
    story.extend(_bullets(plan.cost.recommendations, body_style))

    notes = list(plan.warnings) + list(plan.business_intelligence.risk_flags)
    notes += list(plan.business_intelligence.mediums_to_flag)
    if notes:
        story.extend([Spacer(1, 6 * mm), Paragraph("Warnings and Flags", subtitle_style), Spacer(1, 4 * mm)])
        story.extend(_bullets(notes, body_style))

    for image_path in layout_images:
        image_path = Path(image_path)
        if image_path.exists():
            story.extend(
                [
                    Spacer(1, 6 * mm),
                    Paragraph(image_path.stem.replace("_", " ").title(), subtitle_style),
                    Spacer(1, 4 * mm),
                    Image(str(image_path), width=180 * mm, height=110 * mm),
                ]
            )

    doc.build(story)
    return output_path
