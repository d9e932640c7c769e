"""
Parser for WordPress-style CSV exports.

The tokenizer is deliberately minimal: quotes toggle the quoted state, a
doubled quote inside a quoted field is a literal quote, and quoted fields
cannot span lines. Tab-separated files are detected from the header line.
"""

import re
from typing import List, Dict, Sequence
from urllib.parse import urlparse
from dataclasses import dataclass, field
from core.exceptions import CSVExtractionError
from schemas.normalized import CSVRowData
import logging

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r?\n")
_BYTE_ORDER_MARK = "\ufeff"

# Canonical field -> accepted header names, tried in order
COLUMN_ALIASES: Dict[str, Sequence[str]] = {
    "title": ("title", "post_title"),
    "content": ("content", "post_content"),
    "excerpt": ("excerpt", "post_excerpt"),
    "date": ("date", "post_date"),
    "category_raw": ("categories", "category"),
    "image_url": ("image url", "featured_image_url", "imageurl", "image featured"),
    "image_title": ("image title", "image_title"),
    "image_caption": ("image caption", "image_caption"),
    "image_description": ("image description", "image_description"),
    "image_alt_text": ("image alt text", "image_alt_text", "image alt"),
    "status": ("status",),
    "author_first": ("author first name", "author_first_name"),
    "author_last": ("author last name", "author_last_name"),
    "author_username": ("author username", "author_username", "post_author"),
    "author_email": ("author email", "author_email"),
    "permalink": ("permalink",),
    "slug_provided": ("slug",),
    "meta_title": ("meta_title", "meta title"),
    "meta_description": ("meta_description", "meta description"),
}


@dataclass
class CSVRow:
    """One data row keyed by normalized header; row_number is 1-based"""
    row_number: int
    values: Dict[str, str]

    def get(self, keys: Sequence[str]) -> str:
        """First non-empty value among the given header names"""
        for key in keys:
            value = self.values.get(normalize_header(key))
            if value:
                return value
        return ""


@dataclass
class CSVDocument:
    delimiter: str
    headers: List[str]
    rows: List[CSVRow] = field(default_factory=list)


def detect_delimiter(header_line: str) -> str:
    return "\t" if "\t" in header_line else ","


def parse_csv_line(line: str, delimiter: str) -> List[str]:
    """Split one line into fields, honoring quotes"""
    fields = []
    current = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields


def normalize_header(header: str) -> str:
    return header.lstrip(_BYTE_ORDER_MARK).strip().lower()


def _strip_outer_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_csv(text: str) -> CSVDocument:
    """
    Parse CSV text into rows keyed by normalized header.

    Blank lines are dropped before numbering, so row 1 is the first
    non-empty line after the header. Missing trailing cells read as "".

    Raises:
        CSVExtractionError: If the text has no non-empty lines
    """
    lines = [line for line in _LINE_BREAK.split(text) if line]
    if not lines:
        raise CSVExtractionError("Empty file")

    delimiter = detect_delimiter(lines[0])
    headers = [normalize_header(h) for h in parse_csv_line(lines[0], delimiter)]
    document = CSVDocument(delimiter=delimiter, headers=headers)

    for row_number, line in enumerate(lines[1:], start=1):
        if not line.strip():
            continue
        values = [_strip_outer_quotes(v) for v in parse_csv_line(line, delimiter)]
        row_values = {
            header: values[idx] if idx < len(values) else ""
            for idx, header in enumerate(headers)
        }
        document.rows.append(CSVRow(row_number=row_number, values=row_values))

    delimiter_name = "tab" if delimiter == "\t" else "comma"
    logger.info(f"Parsed CSV with {len(headers)} columns and {len(document.rows)} rows (delimiter={delimiter_name})")
    return document


def slug_from_permalink(permalink: str) -> str:
    """Last path segment of a permalink URL or path"""
    parsed = urlparse(permalink)
    path = parsed.path if parsed.scheme and parsed.netloc else permalink
    parts = [p for p in path.split("/") if p]
    return parts[-1] if parts else ""


def extract_row_data(row: CSVRow) -> CSVRowData:
    """Resolve the alias table for one row"""
    data = {name: row.get(aliases) for name, aliases in COLUMN_ALIASES.items()}

    image_url = data["image_url"]
    if "|" in image_url:
        data["image_url"] = next((s.strip() for s in image_url.split("|") if s.strip()), "")

    final_slug = data["slug_provided"]
    if data["permalink"]:
        final_slug = slug_from_permalink(data["permalink"]) or final_slug

    return CSVRowData(final_slug=final_slug, **data)
