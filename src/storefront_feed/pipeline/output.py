"""JSON output formatter for pipeline results.

The product list is written in the shape the storefront grid consumes:

{
    "summary": {
        "total_products": 2,
        "rejected_rows": 1,
        "with_images": 1,
        "categories": ["Calzado", "Ropa"],
        "price_range": {"min": 1500.0, "max": 2000.0, "avg": 1750.0},
        "processing_time_seconds": 0.01,
        "source": "sheet:abc#gid=0"
    },
    "products": [...],
    "rejected": [...]
}
"""

import json
from pathlib import Path
from typing import Any, Dict

from storefront_feed.models.data_models import PipelineResult


class JSONOutputFormatter:
    """Formats pipeline results as JSON."""

    def format(self, result: PipelineResult) -> Dict[str, Any]:
        """
        Format pipeline result as JSON-serializable dictionary.

        Args:
            result: Complete pipeline execution result

        Returns:
            Dictionary with summary, products and rejected sections
        """
        return {
            "summary": self._format_summary(result),
            "products": [product.to_dict() for product in result.products],
            "rejected": self._format_rejected(result.rejected),
        }

    def _format_summary(self, result: PipelineResult) -> Dict[str, Any]:
        summary = result.summary
        return {
            "total_products": summary.total_products,
            "rejected_rows": summary.rejected_rows,
            "with_images": summary.with_images,
            "categories": list(summary.categories),
            "price_range": {
                "min": round(summary.price_range.min, 2),
                "max": round(summary.price_range.max, 2),
                "avg": round(summary.price_range.avg, 2),
            },
            "processing_time_seconds": round(summary.processing_time_seconds, 3),
            "source": result.source,
        }

    def _format_rejected(self, rejected) -> list:
        return [
            {
                "row": row.row_number,
                "kind": row.kind.value,
                "reason": row.reason,
            }
            for row in rejected
        ]

    def save(self, result: PipelineResult, path: str = "out/products.json") -> None:
        """
        Save formatted result to JSON file.

        Creates parent directories if they don't exist.

        Args:
            result: Pipeline result to save
            path: Output file path
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.format(result), f, indent=2, ensure_ascii=False)
