"""
CSV bulk upload: tokenize raw CSV text, validate headers, map rows to MMI/UCAT insert payloads.
Pure functions, no database access. See importer.py and the Admin page for the insert step.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from engine import UCAT_MAX_OPTIONS

logger = logging.getLogger(__name__)

REQUIRED_MMI_HEADERS = ["question", "answer"]
REQUIRED_UCAT_HEADERS = [
    "question",
    "answer1",
    "answer2",
    "answer3",
    "answer4",
    "answer5",
    "correct_answer",
    "type",
]
REQUIRED_HEADERS = {"mmi": REQUIRED_MMI_HEADERS, "ucat": REQUIRED_UCAT_HEADERS}
PREVIEW_ROWS = 4


class CsvUploadError(ValueError):
    """Raised when an uploaded CSV cannot be turned into questions."""


@dataclass
class UploadBatch:
    upload_type: str
    rows: List[Dict[str, str]]
    payload: List[Dict]
    preview: List[Dict[str, str]] = field(default_factory=list)


def normalize_header(value: str) -> str:
    return value.strip().lower()


def parse_csv(content: str) -> List[List[str]]:
    """
    Split CSV text into rows of trimmed cells.

    Quotes toggle quoted mode wherever they appear; a doubled quote inside quotes is a literal quote.
    Commas and line breaks (\\n, \\r, \\r\\n) inside quotes are kept as text.
    Rows where every cell is empty are dropped.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    current: List[str] = []
    in_quotes = False

    def push_cell():
        row.append("".join(current).strip())
        current.clear()

    def push_row():
        nonlocal row
        rows.append(row)
        row = []

    i = 0
    n = len(content)
    while i < n:
        char = content[i]
        if char == '"':
            if in_quotes and i + 1 < n and content[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            push_cell()
        elif char in ("\n", "\r") and not in_quotes:
            if char == "\r" and i + 1 < n and content[i + 1] == "\n":
                i += 1
            push_cell()
            push_row()
        else:
            current.append(char)
        i += 1

    if current or row:
        push_cell()
        push_row()

    return [cells for cells in rows if any(cells)]


def map_rows(rows: List[List[str]], upload_type: str) -> List[Dict[str, str]]:
    """Use the first row as headers and map body rows to {header: cell}."""
    if upload_type not in REQUIRED_HEADERS:
        raise CsvUploadError(f"Unknown upload type: {upload_type}")
    if not rows:
        raise CsvUploadError("CSV file is empty.")

    header_row, body_rows = rows[0], rows[1:]
    headers = [normalize_header(h) for h in header_row]
    missing = [h for h in REQUIRED_HEADERS[upload_type] if h not in headers]
    if missing:
        raise CsvUploadError(f"Missing headers: {', '.join(missing)}")

    mapped = []
    for cells in body_rows:
        record = {header: (cells[idx] if idx < len(cells) else "") for idx, header in enumerate(headers)}
        if any(value.strip() for value in record.values()):
            mapped.append(record)

    if not mapped:
        raise CsvUploadError("No data rows found.")
    return mapped


def _optional(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def parse_correct_answer(value: Optional[str]) -> Optional[int]:
    """Answer number in 1..5, or None when blank, non-numeric, fractional or out of range."""
    text = (value or "").strip()
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number != int(number) or not 1 <= number <= UCAT_MAX_OPTIONS:
        return None
    return int(number)


def build_payload(rows: List[Dict[str, str]], upload_type: str) -> List[Dict]:
    if upload_type == "mmi":
        return [
            {"question": (row.get("question") or "").strip(), "answer": (row.get("answer") or "").strip()}
            for row in rows
        ]
    payload = []
    for row in rows:
        record = {"question": (row.get("question") or "").strip()}
        for n in range(1, UCAT_MAX_OPTIONS + 1):
            record[f"answer {n}"] = _optional(row.get(f"answer{n}"))
        record["correct_answer"] = parse_correct_answer(row.get("correct_answer"))
        record["type"] = _optional(row.get("type"))
        payload.append(record)
    return payload


def prepare_upload(content: str, upload_type: str) -> UploadBatch:
    """Parse, validate and map a whole CSV document. Raises CsvUploadError."""
    rows = map_rows(parse_csv(content), upload_type)
    payload = build_payload(rows, upload_type)
    logger.info("Prepared %d %s rows from CSV", len(payload), upload_type.upper())
    return UploadBatch(upload_type=upload_type, rows=rows, payload=payload, preview=rows[:PREVIEW_ROWS])
