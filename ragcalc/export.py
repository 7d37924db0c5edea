"""
CSV export of market price records and quote breakdowns.
"""

import csv
import io
from typing import Dict, Iterable, List

from ragcalc.market.models import PriceData
from ragcalc.pricing.models import PriceBreakdown

PRICE_FIELDNAMES = ["Model", "Pricing", "Source", "Timestamp"]
BREAKDOWN_FIELDNAMES = ["Item", "Amount (USD)"]


def _price_rows(records: Iterable[PriceData]) -> List[Dict[str, str]]:
    return [
        {
            "Model": record.model_info,
            "Pricing": record.pricing.replace("\r", "").strip(),
            "Source": record.source,
            "Timestamp": record.timestamp,
        }
        for record in records
    ]


def prices_to_csv_string(records: Iterable[PriceData]) -> str:
    """Converts price records to a CSV string for download."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=PRICE_FIELDNAMES)
    writer.writeheader()
    writer.writerows(_price_rows(records))
    return output.getvalue()


def export_prices_to_csv(records: Iterable[PriceData], output_file: str) -> int:
    """Writes price records to a file and returns the number of rows."""
    rows = _price_rows(records)
    with open(output_file, mode="w", newline="", encoding="utf-8") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=PRICE_FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)


def breakdown_rows(breakdown: PriceBreakdown) -> List[Dict[str, object]]:
    """Flattens a quote breakdown into item/amount rows, features and charges included."""
    rows: List[Dict[str, object]] = [
        {"Item": "Base price", "Amount (USD)": breakdown.base_price},
        {"Item": "Team members", "Amount (USD)": breakdown.team_members_cost},
        {"Item": "Message credits", "Amount (USD)": breakdown.message_credits_cost},
        {"Item": "Vector storage", "Amount (USD)": breakdown.vector_storage_cost},
    ]
    for name, amount in breakdown.additional_features_cost.items():
        rows.append({"Item": name, "Amount (USD)": amount})
    for name, amount in breakdown.custom_charges_cost.items():
        rows.append({"Item": name, "Amount (USD)": amount})
    rows.extend(
        [
            {"Item": "Subtotal", "Amount (USD)": breakdown.subtotal},
            {"Item": "Discount", "Amount (USD)": -breakdown.discount},
            {"Item": "Total", "Amount (USD)": breakdown.total},
        ]
    )
    if breakdown.billing_cycle == "yearly":
        rows.append(
            {"Item": "Yearly discount", "Amount (USD)": -breakdown.yearly_discount_amount}
        )
        rows.append({"Item": "Billed yearly", "Amount (USD)": breakdown.billed_total})
    return rows


def breakdown_to_csv_string(breakdown: PriceBreakdown) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=BREAKDOWN_FIELDNAMES)
    writer.writeheader()
    writer.writerows(breakdown_rows(breakdown))
    return output.getvalue()
