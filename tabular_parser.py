"""
Decodes uploaded spreadsheets and CSV exports into raw records.

Spreadsheets are read with ``dtype=object`` so that cells typed as dates
reach the normalizer as datetime values and text dates stay text. CSV
exports are decoded from the legacy single-byte encoding before splitting.
Any failure here is fatal for the batch: there are no rows to isolate yet.
"""
import io
import logging
import os
import time
from typing import Dict, List

import pandas as pd

from config import Settings
from exceptions import FatalParseError, UnsupportedFormatError
from models import RawRecord, SourceFormat, freeze_record

logger = logging.getLogger(__name__)

EXTENSION_FORMATS: Dict[str, SourceFormat] = {
    ".xlsx": SourceFormat.SPREADSHEET,
    ".xls": SourceFormat.SPREADSHEET,
    ".csv": SourceFormat.DELIMITED,
}

# UTF-8 byte-order mark as it reads after a latin-1 decode, and as a code point
_BOM_PREFIXES = ("\xef\xbb\xbf", "\ufeff")


def detect_source_format(filename: str) -> SourceFormat:
    extension = os.path.splitext(filename or "")[1].lower()
    try:
        return EXTENSION_FORMATS[extension]
    except KeyError:
        raise UnsupportedFormatError(filename) from None


def clean_header(name) -> str:
    header = str(name).strip()
    for bom in _BOM_PREFIXES:
        if header.startswith(bom):
            header = header[len(bom):]
    return header.strip()


def _frame_to_records(df: pd.DataFrame) -> List[RawRecord]:
    df.columns = [clean_header(column) for column in df.columns]
    # Every header is present in every record; blank cells are ""
    df = df.astype(object).where(pd.notna(df), "")
    return [freeze_record(row) for row in df.to_dict(orient="records")]


def read_spreadsheet(content: bytes) -> List[RawRecord]:
    """Read the first worksheet of an .xlsx/.xls workbook."""
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    except Exception as e:
        raise FatalParseError(f"Erro fatal ao processar planilha: {e}") from e
    return _frame_to_records(df)


def read_delimited(content: bytes, encoding: str, delimiter: str) -> List[RawRecord]:
    """Decode a CSV export with ``encoding`` and split it on ``delimiter``."""
    try:
        text = content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise FatalParseError(f"Erro ao ler arquivo CSV: {e}") from e
    if not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, ValueError) as e:
        raise FatalParseError(f"Erro ao ler arquivo CSV: {e}") from e
    return _frame_to_records(df)


def parse_upload(content: bytes, source_format: SourceFormat, settings: Settings) -> List[RawRecord]:
    """
    Parse an uploaded buffer into raw records, in source row order.

    Args:
        content: Uploaded bytes
        source_format: Spreadsheet or delimited text
        settings: Supplies the CSV encoding and delimiter

    Returns:
        List[RawRecord]: one record per data row (header excluded)

    Raises:
        FatalParseError: when the container itself cannot be read
    """
    start_time = time.time()
    if source_format is SourceFormat.SPREADSHEET:
        records = read_spreadsheet(content)
    else:
        records = read_delimited(content, settings.csv_encoding, settings.csv_delimiter)

    logger.info(
        "Parsed upload",
        extra={
            "source_format": source_format.value,
            "size_bytes": len(content),
            "row_count": len(records),
            "read_time_seconds": f"{time.time() - start_time:.2f}",
        }
    )
    return records
