"""
Output exporters -- JSON and CSV files of run summaries.

Both exporters append: the CSV gets one row per run, the JSON file holds an
array that grows by one object per run.  ``force_new`` starts either file
from scratch.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from cfspeed.results import SummaryResult

CSV_FIELDS = (
    "startedAt",
    "download",
    "upload",
    "latency",
    "jitter",
    "downLoadedLatency",
    "downLoadedJitter",
    "upLoadedLatency",
    "upLoadedJitter",
)


def _prepare(filepath: str, force_new: bool) -> bool:
    """Create parent dirs, drop the file if *force_new*.  Returns existence."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    exists = os.path.isfile(filepath)
    if force_new and exists:
        os.unlink(filepath)
        exists = False
    return exists


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def save_json(result: Any, filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


def load_json_results(filepath: str) -> List[Dict[str, Any]]:
    """Read the array of past summaries; missing file means none."""
    if not os.path.isfile(filepath):
        return []
    with open(filepath, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{filepath} does not hold a JSON array")
    return data


def export_json(summary: SummaryResult, filepath: str, force_new: bool = False) -> None:
    exists = _prepare(filepath, force_new)
    results = load_json_results(filepath) if exists else []
    results.append(summary.to_dict())
    save_json(results, filepath)


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def _csv_value(value: Optional[Any]) -> str:
    if value is None:
        return ""
    text = str(value)
    if any(c in text for c in ',"\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def format_csv_header() -> str:
    return ",".join(CSV_FIELDS)


def format_csv_row(summary: SummaryResult) -> str:
    row = summary.to_dict()
    return ",".join(_csv_value(row[name]) for name in CSV_FIELDS)


def export_csv(summary: SummaryResult, filepath: str, force_new: bool = False) -> None:
    """Append a single CSV row, writing the header if the file is new."""
    exists = _prepare(filepath, force_new)
    write_header = not exists or os.path.getsize(filepath) == 0
    with open(filepath, "a", encoding="utf-8") as fh:
        if write_header:
            fh.write(format_csv_header() + "\n")
        fh.write(format_csv_row(summary) + "\n")
