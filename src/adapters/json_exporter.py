"""JSON export of the populated output.

Why JSON:
- The populated tree is consumed by static-site builds and other pipelines.
- Stable formatting (indent, UTF-8) keeps diffs between runs readable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def render_json(output: Any) -> str:
    """Serialize the output with stable formatting."""

    return json.dumps(output, ensure_ascii=False, indent=2, default=str)


def export_json(*, output: Any, output_path: Path) -> Path:
    """Write the output as UTF-8 JSON, creating parent directories."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_json(output) + "\n", encoding="utf-8")
    return output_path
