"""JSON and CSV reports for drill batches."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict

from .models import BatchResult


CSV_HEADER = [
    "rule",
    "title",
    "service",
    "status",
    "resources",
    "cleanup_failures",
    "duration_seconds",
    "error",
    "finished_at",
]


def render_csv(result: BatchResult) -> str:
    """Serialize scenario results into CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for scenario in result.results:
        writer.writerow(
            [
                scenario.rule,
                scenario.title,
                scenario.service,
                scenario.status,
                ";".join(f"{handle.kind}={handle.identifier}" for handle in scenario.resources),
                len(scenario.cleanup_failures),
                scenario.duration_seconds,
                scenario.error or "",
                scenario.finished_at.isoformat(),
            ]
        )
    return buffer.getvalue()


def write_csv(result: BatchResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_csv(result), encoding="utf-8")
    return path


def write_json(result: BatchResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    return path


def load_result(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
