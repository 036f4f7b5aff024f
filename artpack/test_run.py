"""
Simple script to run the artwork packing pipeline end-to-end on a sample job.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from artpack.core.catalog import load_catalog
from artpack.core.planner import build_packing_plan
from artpack.core.solver_box_to_container import DeliveryCapabilities
from artpack.models.item import Item
from artpack.report.pdf_generator import generate_pdf_report
from artpack.visualization import layout_plot

SAMPLE_RECORDS = [
    {"line_number": 1, "tag_number": 101, "quantity": 6, "final_medium": "Paper Print - Framed",
     "width": 24, "height": 18, "glazing": "Regular Glass", "hardware": "D-Rings"},
    {"line_number": 2, "tag_number": 102, "quantity": 4, "final_medium": "Paper Print - Framed",
     "width": 18, "height": 24, "glazing": "Regular Glass", "hardware": "D-Rings"},
    {"line_number": 3, "tag_number": 103, "quantity": 9, "final_medium": "Canvas - Float Mount",
     "width": 43, "height": 33, "depth": 2},
    {"line_number": 4, "tag_number": 104, "quantity": 2, "final_medium": "Mirror",
     "width": 30, "height": 40, "hardware": "Z-Clip"},
    {"line_number": 5, "tag_number": 105, "quantity": 3, "final_medium": "Acoustic Panel",
     "width": 60, "height": 30, "depth": 2},
    {"line_number": 6, "tag_number": 106, "quantity": 1, "final_medium": "Wall Decor",
     "width": 200, "height": 48, "weight": 180},
]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    base_dir = Path(__file__).resolve().parent
    output_dir = base_dir / "artifacts"
    output_dir.mkdir(parents=True, exist_ok=True)

    catalog = load_catalog()
    items = [Item.from_record(record) for record in SAMPLE_RECORDS]
    plan = build_packing_plan(
        items,
        catalog,
        capabilities=DeliveryCapabilities(accepts_pallets=True, accepts_crates=True),
        client_name="Sunrise Senior Living",
        strategy="balanced",
    )

    image_paths = []
    for container in plan.containers:
        image_path = output_dir / f"{container.id.lower()}_layout.png"
        layout_plot.save_figure_image(layout_plot.container_layout_figure(container), image_path)
        image_paths.append(image_path)
    weight_path = output_dir / "weight_summary.png"
    layout_plot.save_figure_image(layout_plot.weight_summary_figure(plan), weight_path)
    image_paths.append(weight_path)

    pdf_path = generate_pdf_report(output_dir / "packing_plan.pdf", plan, layout_images=image_paths)

    print("=== Artwork Packing Summary ===")
    print(f"Strategy: {plan.strategy}")
    print(f"Pieces: {plan.metrics.total_pieces} ({plan.metrics.manual_handling_pieces} manual handling)")
    print(f"Boxes: {plan.metrics.box_counts}")
    print(f"Containers: {plan.metrics.container_counts}")
    print(f"Shipment Weight: {plan.weight_summary.shipment_weight:,.1f} lbs")
    print(f"Estimated Cost: ${plan.cost.total_cost:,.2f}")
    for entry in plan.manual_handling:
        print(f"Manual handling - line {entry.item.line_number} x{entry.quantity}: {entry.reason}")
    for warning in plan.warnings:
        print(f"Warning: {warning}")
    print(f"Report saved to: {pdf_path}")


if __name__ == "__main__":
    main()
