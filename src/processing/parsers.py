"""Parser that normalizes product CSV payloads into typed rows."""

import csv
import io
import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.core.logging import get_logger

logger = get_logger(__name__)

ID_COLUMN = "ID"
NAME_COLUMN = "Nom"
PRICE_COLUMN = "Prix"
RATING_COLUMN = "Note_Client"
QUANTITY_FRAGMENT = "quantit"
# float() and int() alone would also accept "1_000" or non-ASCII digits
_FLOAT_LITERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


class InvalidDatasetFormatError(ValueError):
    """Raised when the delimited text itself is malformed."""


@dataclass(frozen=True, slots=True)
class Row:
    id: int | None
    name: str
    price: float
    quantity: float
    rating: float


def is_quantity_header(header: str) -> bool:
    """Match quantity header variants such as "Quantité" or "Quantit e"."""
    return QUANTITY_FRAGMENT in "".join(header.split()).casefold()


def resolve_quantity_column(
    headers: Sequence[str],
    predicate: Callable[[str], bool] = is_quantity_header,
) -> int | None:
    """Return the index of the first header accepted by ``predicate``."""
    matches = [index for index, header in enumerate(headers) if predicate(header)]
    if not matches:
        logger.warning("parser.quantity_column.missing", headers=list(headers))
        return None
    if len(matches) > 1:
        logger.warning(
            "parser.quantity_column.ambiguous",
            candidates=[headers[index] for index in matches],
            selected=headers[matches[0]],
        )
    return matches[0]


def _to_float(raw: str) -> float:
    """Coerce a cell to a finite float, returning NaN when it cannot be parsed."""
    if not _FLOAT_LITERAL.fullmatch(raw):
        return math.nan
    value = float(raw)
    return value if math.isfinite(value) else math.nan


def _to_int(raw: str) -> int | None:
    return int(raw) if _INT_LITERAL.fullmatch(raw) else None


def _is_blank(record: list[str]) -> bool:
    return not record or (len(record) == 1 and not record[0].strip())


def _read_records(text: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=",", strict=True)
    try:
        return [[cell.strip() for cell in record] for record in reader if not _is_blank(record)]
    except csv.Error as exc:
        raise InvalidDatasetFormatError(
            f"Malformed CSV near line {reader.line_num}: {exc}"
        ) from exc


def parse_rows(payload: bytes | str) -> list[Row]:
    """Parse a product CSV payload with a header line into ordered rows."""
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise InvalidDatasetFormatError("Dataset is not valid UTF-8.") from exc
    else:
        text = payload.removeprefix("\ufeff")

    records = _read_records(text)
    if not records:
        raise InvalidDatasetFormatError("CSV file must include a header row.")

    headers, data = records[0], records[1:]
    columns = {header: index for index, header in reversed(list(enumerate(headers)))}
    quantity_index = resolve_quantity_column(headers)

    def cell(record: list[str], column: str) -> str | None:
        index = columns.get(column)
        return None if index is None else record[index]

    rows: list[Row] = []
    for offset, record in enumerate(data):
        if len(record) != len(headers):
            raise InvalidDatasetFormatError(
                f"Record {offset + 2} has {len(record)} fields, header has {len(headers)}."
            )
        price = cell(record, PRICE_COLUMN)
        rating = cell(record, RATING_COLUMN)
        raw_id = cell(record, ID_COLUMN)
        quantity = 0.0
        if quantity_index is not None:
            quantity = _to_float(record[quantity_index])
            if math.isnan(quantity):
                quantity = 0.0
        rows.append(
            Row(
                id=None if raw_id is None else _to_int(raw_id),
                name=cell(record, NAME_COLUMN) or "",
                price=math.nan if price is None else _to_float(price),
                quantity=quantity,
                rating=math.nan if rating is None else _to_float(rating),
            )
        )
    return rows
