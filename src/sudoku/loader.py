import json
import os
from typing import Any, Dict, List

import pandas as pd

from .grid import SIZE
from .parser import dump_puzzle, parse_text_puzzle


def load_puzzles(file_path: str) -> List[Dict[str, Any]]:
    """
    Reads puzzles from a file. Handles .json, .jsonl, .parquet, .csv and the
    plain-text grid format (.txt).
    Returns a list of raw puzzle dictionaries in the wire format.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    stem = os.path.splitext(os.path.basename(file_path))[0]

    def _is_nonempty_str(value: Any) -> bool:
        return isinstance(value, str) and value.strip() != ""

    def _decode_cells(value: Any) -> Any:
        # Tabular sources store the grid as JSON text or an 81-character digit string.
        if hasattr(value, "tolist"):
            value = value.tolist()
        if isinstance(value, list):
            # Parquet rows come back as arrays of numpy arrays.
            return [row.tolist() if hasattr(row, "tolist") else row for row in value]
        if not _is_nonempty_str(value):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        digits = [0 if ch in ".0" else int(ch) for ch in text if ch in ".0123456789"]
        if len(digits) == SIZE * SIZE:
            return [digits[r * SIZE:(r + 1) * SIZE] for r in range(SIZE)]
        return value

    def _decode_variants(value: Any) -> Any:
        if value is None:
            return []
        if hasattr(value, "tolist"):
            value = value.tolist()
        if isinstance(value, float) and pd.isna(value):
            return []
        if _is_nonempty_str(value):
            return json.loads(value)
        if isinstance(value, str):
            return []
        return value

    def _normalize_record(record: Dict[str, Any], index: int) -> Dict[str, Any]:
        if "cells" not in record:
            for key in ("grid", "puzzle", "quizzes"):
                if key in record:
                    record["cells"] = record.pop(key)
                    break
        if "cells" in record:
            record["cells"] = _decode_cells(record["cells"])
        record["variants"] = _decode_variants(record.get("variants"))
        if not _is_nonempty_str(record.get("id")):
            record["id"] = str(record["id"]) if record.get("id") is not None else f"{stem}-{index}"
        return record

    def _normalize_all(records: List[Any]) -> List[Dict[str, Any]]:
        return [_normalize_record(r, i) for i, r in enumerate(records) if isinstance(r, dict)]

    def _read_json_lines(path: str) -> List[Dict[str, Any]]:
        data = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(obj, dict):
                    data.append(obj)
        return _normalize_all(data)

    # Case 1: Parquet / CSV (tabular)
    if file_path.endswith((".parquet", ".csv")):
        try:
            if file_path.endswith(".parquet"):
                df = pd.read_parquet(file_path)
            else:
                df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
            records = df.to_dict(orient="records")
            return _normalize_all(records)
        except Exception as e:
            print(f"Error reading {file_path}: {e}")
            return []

    # Case 2: Plain-text grid with variant lines
    if file_path.endswith(".txt"):
        with open(file_path, "r", encoding="utf-8") as f:
            grid, constraints = parse_text_puzzle(f.read())
        record = dump_puzzle(grid, constraints)
        record["id"] = stem
        return [record]

    # Case 3: JSON File (array or object)
    if file_path.endswith(".json"):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            if isinstance(payload, list):
                return _normalize_all(payload)
            if isinstance(payload, dict):
                return _normalize_all([payload])
            return []
        except json.JSONDecodeError:
            # Some sources use ".json" but actually store JSONL; fall back to line-delimited parsing.
            return _read_json_lines(file_path)

    # Case 4: JSONL File
    return _read_json_lines(file_path)

