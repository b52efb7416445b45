"""Tests for delimited text import."""

import pytest

from kakeibo.importer import (
    InvalidAmountError,
    InvalidDateError,
    MissingHeaderError,
    MissingRequiredHeadersError,
    detect_delimiter,
    normalize_date,
    parse_amount,
    parse_delimited_text,
)
from kakeibo.models.record import MAX_AMOUNT, Category, Payer


HEADER = "date,category,amount,memo,payer"


def parse(text, **kwargs):
    kwargs.setdefault("default_payer", Payer.HUSBAND)
    return parse_delimited_text(text, **kwargs)


class TestNormalizeDate:
    """Tests for date normalization."""

    def test_slash_date_is_zero_padded(self):
        """Test slash dates become YYYY-MM-DD."""
        assert normalize_date("2024/3/5") == "2024-03-05"
        assert normalize_date("2024/12/31") == "2024-12-31"
        assert normalize_date(" 2024/1/9 ") == "2024-01-09"

    def test_canonical_date_passes_through(self):
        """Test canonical dates are unchanged."""
        assert normalize_date("2024-03-05") == "2024-03-05"

    def test_slash_date_needs_three_parts(self):
        """Test slash dates with the wrong number of parts are rejected."""
        for bad in ("2024/3", "2024/3/5/1", "3/5"):
            with pytest.raises(InvalidDateError):
                normalize_date(bad)

    def test_non_canonical_dates_rejected(self):
        """Test unpadded or impossible dates are rejected."""
        for bad in ("2024-3-5", "2024/2/30", "2024//5", "20240305", "March 5"):
            with pytest.raises(InvalidDateError):
                normalize_date(bad)

    def test_slash_output_always_canonical(self):
        """Test every real Y/M/D date normalizes to the canonical pattern."""
        import re

        pattern = re.compile(r"^\d{4}-\d{2}-\d{2}$")
        for month in range(1, 13):
            for day in (1, 9, 10, 28):
                assert pattern.match(normalize_date(f"2023/{month}/{day}"))


class TestParseAmount:
    """Tests for amount parsing."""

    def test_valid_amounts(self):
        """Test positive whole amounts."""
        assert parse_amount("1500") == 1500
        assert parse_amount("12.0") == 12
        assert parse_amount("1e3") == 1000

    def test_invalid_amounts(self):
        """Test non-numbers, non-finite, non-positive and fractional amounts."""
        for bad in ("abc", "NaN", "Infinity", "0", "-5", "12.5", "1,500"):
            with pytest.raises(InvalidAmountError):
                parse_amount(bad)

    def test_huge_exponent_amounts_rejected(self):
        """Test exponent notation cannot produce an oversized amount."""
        for bad in ("1e400", "1e5000", "1E+16", str(MAX_AMOUNT + 1)):
            with pytest.raises(InvalidAmountError):
                parse_amount(bad)

    def test_maximum_amount_accepted(self):
        assert parse_amount(str(MAX_AMOUNT)) == MAX_AMOUNT
        assert parse_amount("1e15") == MAX_AMOUNT


class TestDetectDelimiter:
    """Tests for delimiter detection."""

    def test_tab_wins_when_present(self):
        assert detect_delimiter("date\tcategory\tamount") == "\t"

    def test_comma_otherwise(self):
        assert detect_delimiter("date,category,amount") == ","


class TestParseDelimitedText:
    """Tests for the full import parse."""

    def test_slash_date_scenario(self):
        """Test a comma row with a slash date is accepted and normalized."""
        result = parse(f"{HEADER}\n2024/3/5,食費,1500,lunch,夫")

        assert result.rejected_count == 0
        assert len(result.accepted) == 1
        record = result.accepted[0]
        assert record.date == "2024-03-05"
        assert record.category == Category.FOOD
        assert record.amount == 1500
        assert record.memo == "lunch"
        assert record.payer == Payer.HUSBAND
        assert record.id is not None

    def test_negative_amount_skipped(self):
        """Test a negative amount skips only that row."""
        text = f"{HEADER}\n2024-01-01,食費,1000,,夫\n2024-01-02,食費,-5,,夫\n2024-01-03,娯楽,200,,妻"
        result = parse(text)

        assert [r.amount for r in result.accepted] == [1000, 200]
        assert result.rejected_count == 1
        issue = result.issues[0]
        assert issue.row_number == 3
        assert issue.field == "amount"
        assert issue.issue_type == "invalid_amount"
        assert result.reasons[0].startswith("Row 3:")

    def test_missing_payer_header_fails(self):
        """Test a header without payer aborts the import."""
        with pytest.raises(MissingRequiredHeadersError) as exc_info:
            parse("date,category,amount,memo\n2024-01-01,食費,1000,x")
        assert exc_info.value.missing == ["payer"]
        assert "payer" in str(exc_info.value)

    def test_missing_headers_listed_in_order(self):
        """Test every missing required column is named."""
        with pytest.raises(MissingRequiredHeadersError) as exc_info:
            parse("memo,amount\nx,100")
        assert exc_info.value.missing == ["date", "category", "payer"]

    def test_memo_column_optional(self):
        """Test memo defaults to an empty string."""
        result = parse("date,category,amount,payer\n2024-05-01,交通費,220,妻")
        assert result.accepted[0].memo == ""

    def test_needs_header_and_data_line(self):
        """Test empty text or a lone header fails the import."""
        for text in ("", "\n\n", HEADER, f"{HEADER}\n\n"):
            with pytest.raises(MissingHeaderError):
                parse(text)

    def test_tab_separated_paste(self):
        """Test spreadsheet clipboard text."""
        text = "date\tcategory\tamount\tmemo\tpayer\n2024/4/1\t日用品\t398\tsoap, large\t妻"
        result = parse(text)

        assert result.delimiter == "\t"
        record = result.accepted[0]
        assert record.date == "2024-04-01"
        assert record.memo == "soap, large"
        assert record.payer == Payer.WIFE

    def test_blank_header_columns_ignored(self):
        """Test blank header cells are skipped when zipping rows."""
        text = "date\t\tcategory\tamount\tpayer\n2024-01-02\tjunk\t食費\t800\t妻"
        result = parse(text)

        assert result.rejected_count == 0
        record = result.accepted[0]
        assert record.category == Category.FOOD
        assert record.amount == 800

    def test_trailing_blank_header_columns_not_required(self):
        """Test rows need not fill trailing ignored columns."""
        text = "date,category,amount,memo,payer,,\n2024-01-01,食費,100,,夫"
        result = parse(text)
        assert result.accepted_count == 1

    def test_extra_cells_ignored(self):
        """Test cells beyond the header are dropped."""
        result = parse(f"{HEADER}\n2024-01-01,食費,100,x,夫,extra,cells")
        assert result.accepted[0].memo == "x"

    def test_short_row_skipped(self):
        """Test a row with fewer cells than the header."""
        result = parse(f"{HEADER}\n2024-01-01,食費,100")
        assert result.accepted == []
        assert result.issues[0].issue_type == "row_too_short"

    def test_empty_required_cell_skipped(self):
        """Test empty date, category or amount skips the row."""
        text = f"{HEADER}\n,食費,100,,夫\n2024-01-01,,100,,夫\n2024-01-01,食費,,,夫"
        result = parse(text)
        assert result.accepted == []
        assert [i.field for i in result.issues] == ["date", "category", "amount"]
        assert {i.issue_type for i in result.issues} == {"missing_field"}

    def test_empty_payer_uses_default(self):
        """Test an empty payer cell falls back to the default payer."""
        text = f"{HEADER}\n2024-01-01,食費,100,,"
        assert parse(text).accepted[0].payer == Payer.HUSBAND
        assert parse(text, default_payer=Payer.WIFE).accepted[0].payer == Payer.WIFE

    def test_unknown_category_and_payer_skipped(self):
        """Test labels outside the enums are rejected."""
        text = f"{HEADER}\n2024-01-01,Groceries,100,,夫\n2024-01-01,食費,100,,Bob"
        result = parse(text)
        assert result.accepted == []
        assert [i.issue_type for i in result.issues] == ["unknown_category", "unknown_payer"]

    def test_bad_date_skipped(self):
        """Test invalid dates are reported."""
        result = parse(f"{HEADER}\n2024/13/1,食費,100,,夫\n2024-1-1,食費,100,,夫")
        assert result.accepted == []
        assert all(i.issue_type == "invalid_date" for i in result.issues)

    def test_crlf_blank_lines_and_bom(self):
        """Test Windows line endings, blank lines and a BOM."""
        text = f"\ufeff{HEADER}\r\n\r\n2024-01-01,食費,100,,夫\r\n   \r\n2024-01-02,bad,100,,夫\r\n"
        result = parse(text)

        assert result.accepted_count == 1
        # Row numbers count physical lines, blank ones included
        assert result.issues[0].row_number == 5

    def test_row_order_and_unique_ids(self):
        """Test accepted records keep row order and get distinct ids."""
        rows = "\n".join(f"2024-02-{day:02d},食費,{day * 100},,夫" for day in range(1, 6))
        result = parse(f"{HEADER}\n{rows}")

        assert [r.date for r in result.accepted] == [f"2024-02-{d:02d}" for d in range(1, 6)]
        assert len({r.id for r in result.accepted}) == 5

    def test_nothing_valid_summary(self):
        """Test the single message when every row fails."""
        result = parse(f"{HEADER}\nx,y,z,,夫\n2024-01-01,食費,-1,,夫")
        assert result.rejected_count == 2
        assert result.summary() == "No valid rows were found to import."

    def test_huge_amount_row_skipped(self):
        """Test an exponent amount skips the row and keeps the rest."""
        result = parse(f"{HEADER}\n2024-01-01,食費,1e400,x,夫\n2024-01-02,食費,300,,夫")
        assert [r.amount for r in result.accepted] == [300]
        assert result.issues[0].issue_type == "invalid_amount"
        assert result.issues[0].row_number == 2

    def test_long_memo_accepted(self):
        """Test memo is free-form text with no length limit."""
        memo = "x" * 2000
        result = parse(f"{HEADER}\n2024-01-01,食費,100,{memo},夫")
        assert result.rejected_count == 0
        assert result.accepted[0].memo == memo

    def test_custom_required_fields(self):
        """Test a caller may require extra columns."""
        with pytest.raises(MissingRequiredHeadersError) as exc_info:
            parse(f"{HEADER}\n2024-01-01,食費,100,,夫", required_fields=("date", "category", "amount", "payer", "shop"))
        assert exc_info.value.missing == ["shop"]
