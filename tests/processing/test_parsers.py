import math

import pytest

from src.processing.parsers import (
    InvalidDatasetFormatError,
    Row,
    is_quantity_header,
    parse_rows,
    resolve_quantity_column,
)

HEADER = "ID,Nom,Prix,Quantité,Note_Client\n"


def test_parse_rows_csv_success(sample_csv_bytes: bytes) -> None:
    rows = parse_rows(sample_csv_bytes)

    assert rows == [
        Row(id=1, name="A", price=5.0, quantity=10.0, rating=3.0),
        Row(id=2, name="B", price=600.0, quantity=0.0, rating=6.0),
        Row(id=3, name="C", price=50.0, quantity=1500.0, rating=2.0),
    ]


@pytest.mark.parametrize("header", ["Quantité", "quantite", "QUANTITY", "Quan tité", "Quantité "])
def test_parse_rows_accepts_quantity_header_variants(header: str) -> None:
    text = f"ID,Nom,Prix,{header},Note_Client\n1,A,20,7,4\n"

    rows = parse_rows(text)

    assert rows[0].quantity == 7.0


def test_parse_rows_missing_quantity_column_defaults_to_zero() -> None:
    rows = parse_rows("ID,Nom,Prix,Note_Client\n1,A,20,4\n")

    assert rows[0].quantity == 0.0


def test_parse_rows_keeps_unparseable_values_as_markers() -> None:
    rows = parse_rows(HEADER + "x,A,abc,n/a,\n")

    row = rows[0]
    assert row.id is None
    assert math.isnan(row.price)
    assert math.isnan(row.rating)
    # unparseable quantity normalizes to zero
    assert row.quantity == 0.0


def test_parse_rows_treats_non_finite_text_as_unparseable() -> None:
    rows = parse_rows(HEADER + "1,A,inf,3,nan\n")

    assert math.isnan(rows[0].price)
    assert math.isnan(rows[0].rating)


def test_parse_rows_skips_empty_lines_and_trims_cells() -> None:
    text = "ID , Nom ,Prix,Quantité, Note_Client\n\n 1 , Widget , 12.5 , 3 , 4.5 \n\n"

    rows = parse_rows(text)

    assert rows == [Row(id=1, name="Widget", price=12.5, quantity=3.0, rating=4.5)]


def test_parse_rows_strips_utf8_bom() -> None:
    payload = b"\xef\xbb\xbf" + (HEADER + "7,A,20,2,4\n").encode("utf-8")

    rows = parse_rows(payload)

    assert rows[0].id == 7


def test_parse_rows_handles_quoted_fields() -> None:
    rows = parse_rows(HEADER + '1,"Chair, oak",45,2,4\n')

    assert rows[0].name == "Chair, oak"


def test_parse_rows_unterminated_quote_raises() -> None:
    with pytest.raises(InvalidDatasetFormatError, match="Malformed CSV"):
        parse_rows(HEADER + '1,"A,5,10,3\n')


def test_parse_rows_field_count_mismatch_raises() -> None:
    with pytest.raises(InvalidDatasetFormatError, match="has 3 fields"):
        parse_rows(HEADER + "1,A,5\n")


def test_parse_rows_without_header_raises() -> None:
    with pytest.raises(InvalidDatasetFormatError, match="header row"):
        parse_rows(b"\n\n")


def test_parse_rows_invalid_utf8_raises() -> None:
    with pytest.raises(InvalidDatasetFormatError, match="valid UTF-8"):
        parse_rows(b"\x80\x81\x82")


def test_parse_rows_header_only_returns_no_rows() -> None:
    assert parse_rows(HEADER) == []


def test_resolve_quantity_column_prefers_first_match() -> None:
    headers = ["ID", "Quantité", "Quantity_Reserved"]

    assert resolve_quantity_column(headers) == 1


def test_resolve_quantity_column_returns_none_without_match() -> None:
    assert resolve_quantity_column(["ID", "Nom"]) is None


def test_resolve_quantity_column_accepts_custom_predicate() -> None:
    headers = ["ID", "Qty", "Prix"]

    assert resolve_quantity_column(headers, predicate=lambda header: header == "Qty") == 1


def test_is_quantity_header_ignores_case_and_whitespace() -> None:
    assert is_quantity_header(" QUANT ITÉ ")
    assert not is_quantity_header("Prix")


@pytest.mark.parametrize("raw", ["1_000", "١٢", "0x10", "1e", "--1", "1 000"])
def test_parse_rows_rejects_non_decimal_number_text(raw: str) -> None:
    rows = parse_rows(HEADER + f"{raw},A,{raw},{raw},{raw}\n")

    row = rows[0]
    assert row.id is None
    assert math.isnan(row.price)
    assert math.isnan(row.rating)
    assert row.quantity == 0.0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12", 12.0), ("-3.5", -3.5), (".5", 0.5), ("7.", 7.0), ("+2e3", 2000.0)],
)
def test_parse_rows_accepts_decimal_number_text(raw: str, expected: float) -> None:
    rows = parse_rows(HEADER + f"1,A,{raw},1,4\n")

    assert rows[0].price == expected
