# athletics_flow/io.py
from __future__ import annotations
from typing import IO, Any, Dict, List, Optional, Tuple, Union
from pathlib import Path
import json
import logging

import pandas as pd

from athletics_flow.constants import DEFAULT_DATASET
from athletics_flow.graph import InvalidInputError

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[bytes], IO[str]]

EXCEL_EXTS = {".xlsx", ".xls", ".xlsm"}


def _suffix(source: Source) -> str:
    name = source if isinstance(source, (str, Path)) else getattr(source, "name", None)
    return Path(str(name or "")).suffix.lower()


def _rewind(file_obj) -> None:
    if hasattr(file_obj, "seek"):
        file_obj.seek(0)


def read_csv_any(file_or_buffer: Source, **kwargs) -> pd.DataFrame:
    """
    Read CSV from path/handle, falling back to EU-style files
    (semicolon-delimited, comma decimals).
    """
    try:
        df = pd.read_csv(file_or_buffer, **kwargs)
    except (pd.errors.ParserError, UnicodeDecodeError):
        df = None
    # A semicolon file parses without error into a single "a;b;c" column
    if df is None or (len(df.columns) == 1 and ";" in str(df.columns[0])):
        logger.debug("Re-reading %s as semicolon-delimited CSV", getattr(file_or_buffer, "name", file_or_buffer))
        _rewind(file_or_buffer)
        return pd.read_csv(file_or_buffer, sep=";", decimal=",", **kwargs)
    return df


def get_excel_sheets(file_obj: Source) -> List[str]:
    """Sheet names of a workbook, leaving the handle rewound for the next read."""
    _rewind(file_obj)
    with pd.ExcelFile(file_obj) as xls:
        sheets = list(xls.sheet_names)
    _rewind(file_obj)
    return sheets


def read_table_any(file_obj: Source, sheet_name: Optional[Union[str, int]] = 0, **kwargs) -> pd.DataFrame:
    _rewind(file_obj)
    if _suffix(file_obj) in EXCEL_EXTS:
        return pd.read_excel(file_obj, sheet_name=sheet_name, **kwargs)
    return read_csv_any(file_obj, **kwargs)


def load_document(source: Source) -> Any:
    """Parse a JSON document from a path or an open (text or binary) handle."""
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8") as fh:
            return json.load(fh)
    _rewind(source)
    raw = source.getvalue() if hasattr(source, "getvalue") else source.read()
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def rows_from_document(doc: Any, dataset: str = DEFAULT_DATASET) -> List[Dict[str, Any]]:
    """
    Pick the athletics table out of a document. A bare list is taken as the
    table itself; otherwise doc[dataset] must be a list of row objects.
    """
    if isinstance(doc, list):
        table = doc
    elif isinstance(doc, dict):
        if dataset not in doc:
            raise InvalidInputError(
                f"Dataset '{dataset}' not found. Available: {', '.join(map(str, doc.keys())) or '(none)'}"
            )
        table = doc[dataset]
    else:
        raise InvalidInputError(f"Unsupported document type: {type(doc).__name__}")

    if not isinstance(table, list):
        raise InvalidInputError(f"Dataset '{dataset}' is not a list of rows")
    return table


def rows_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    # Drop completely empty rows (common with spreadsheet exports), keep file order
    df = df.dropna(how="all")
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


def load_rows(
    source: Source,
    dataset: str = DEFAULT_DATASET,
    sheet_name: Optional[Union[str, int]] = 0,
) -> List[Dict[str, Any]]:
    """
    Load the ordered row records from a JSON document, CSV or Excel file.
    """
    ext = _suffix(source)
    if ext in EXCEL_EXTS or ext == ".csv":
        rows = rows_from_frame(read_table_any(source, sheet_name=sheet_name))
    else:
        rows = rows_from_document(load_document(source), dataset=dataset)
    logger.info("Loaded %d rows from %s", len(rows), getattr(source, "name", source))
    return rows


def available_datasets(doc: Any) -> List[str]:
    """Keys of a document whose values look like row tables."""
    if not isinstance(doc, dict):
        return []
    return [k for k, v in doc.items() if isinstance(v, list)]


def validate_upload(
    uploaded,
    allowed_exts: set,
    allowed_mime: set,
    max_bytes: int
) -> Tuple[bool, str]:
    """Preflight an uploaded file (extension, MIME type, size) before parsing it."""
    if uploaded is None:
        return False, "No file uploaded."
    ext = _suffix(uploaded)
    mime = getattr(uploaded, "type", "") or ""
    size = getattr(uploaded, "size", None)

    errs = []
    if ext not in allowed_exts:
        errs.append(f"Unsupported extension '{ext}'. Allowed: {', '.join(sorted(allowed_exts))}.")
    # application/octet-stream is in allowed_mime; the extension check still applies
    if mime not in allowed_mime:
        errs.append(f"Unexpected MIME type '{mime}'.")
    if isinstance(size, int) and size > max_bytes:
        errs.append(f"File too large ({size / 1_000_000:.1f} MB). Max {max_bytes / 1_000_000:.1f} MB.")
    if errs:
        logger.warning("Rejected upload %r: %s", getattr(uploaded, "name", ""), " ".join(errs))

    return not errs, " ".join(errs)
