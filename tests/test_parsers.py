"""Tests for the bank statement and ledger parsers."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import Workbook

from bank_gl_match.models.transaction import BankCategory
from bank_gl_match.parsers import BankStatementParser, LedgerParser, extract_year_from_filename
from bank_gl_match.parsers.common import clean_text, parse_amount, parse_date
from bank_gl_match.utils.exceptions import BankParseError, LedgerParseError

BANK_CSV = """Date,Type,Vendor,Description,Amount,Source_File
01/15/2025,Deposit,CUSTOMER A,ACH CREDIT,"5,000.00",jan.pdf
01/16/2025,Withdrawal,ZELLE,ZELLE PAYMENT TO JOHN SMITH JPM99B1234,-250.00,jan.pdf
01/17/2025,Fee,BANK,MONTHLY SERVICE FEE,-15.00,jan.pdf
12/31/2024,Withdrawal,ACME,PAYMENT TO ACME CORP,-99.99,dec.pdf
01/18/2025,Transfer,SELF,INTERNAL,-10.00,jan.pdf
"""

LEDGER_ROWS = [
    ["General Ledger", None, None, None, None, None, None, None, None],
    ["January 2025", None, None, None, None, None, None, None, None],
    ["Date", "Trans #", "Type", "Account", "Name", "Memo", "Split", "Debit", "Credit"],
    [datetime(2025, 1, 15), 101, "Deposit", "Operating Account", "CUSTOMER A", "Invoice 9", "Sales", 5000, None],
    [datetime(2025, 1, 16), 102, "Check", "Operating Account", None, "", "Contractors", None, 250],
    [datetime(2025, 1, 16), 103, "Check", "Savings", "OTHER", "", "Expenses", None, 40],
    [None, None, None, None, None, None, None, None, None],
    [datetime(2025, 1, 20), None, "Total", None, None, None, None, 5000, 250],
    [datetime(2024, 12, 30), 104, "Check", "Chase 0275 Checking", "ACME", "", "Supplies", None, 99.99],
]


@pytest.fixture
def bank_file(tmp_path):
    path = tmp_path / "Bank 2025.csv"
    path.write_text(BANK_CSV)
    return path


@pytest.fixture
def ledger_xlsx(tmp_path):
    path = tmp_path / "ledger.xlsx"
    wb = Workbook()
    ws = wb.active
    for row in LEDGER_ROWS:
        ws.append(row)
    wb.save(path)
    return path


class TestValueParsing:
    """Tests for the shared cell parsers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("01/15/2025", date(2025, 1, 15)),
            ("1/5/2025", date(2025, 1, 5)),
            ("2025-01-15", date(2025, 1, 15)),
            (datetime(2025, 1, 15, 9, 30), date(2025, 1, 15)),
            (date(2025, 1, 15), date(2025, 1, 15)),
            (45672, date(2025, 1, 15)),
        ],
    )
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", ["", None, "not a date"])
    def test_parse_date_rejects(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1,234.50", Decimal("1234.50")),
            ("$99.999", Decimal("100.00")),
            ("-250", Decimal("-250.00")),
            (12.5, Decimal("12.50")),
            ("", Decimal("0")),
            (None, Decimal("0")),
        ],
    )
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    def test_parse_amount_rejects_text(self):
        with pytest.raises(ValueError):
            parse_amount("twelve")

    def test_clean_text(self):
        assert clean_text(101.0) == "101"
        assert clean_text("  ACME ") == "ACME"
        assert clean_text(float("nan")) == ""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("Bank 2025.csv", 2025),
            ("transactions-2024-export.xlsx", 2024),
            ("GL 2023 final.xlsx", 2023),
            ("bank_2025.csv", None),
            ("statement.csv", None),
        ],
    )
    def test_extract_year_from_filename(self, filename, expected):
        assert extract_year_from_filename(filename) == expected


class TestBankStatementParser:
    """Tests for BankStatementParser."""

    def test_parse_file(self, config, bank_file):
        records = BankStatementParser(config).parse_file(bank_file)

        # Fee is excluded and the unknown Transfer type is skipped
        assert [r.date for r in records] == [
            date(2025, 1, 15),
            date(2025, 1, 16),
            date(2024, 12, 31),
        ]
        deposit, withdrawal, _ = records
        assert deposit.category == BankCategory.DEPOSIT
        assert deposit.amount == Decimal("5000.00")
        assert deposit.source_file == "jan.pdf"
        assert withdrawal.category == BankCategory.WITHDRAWAL
        assert withdrawal.amount == Decimal("-250.00")
        assert withdrawal.absolute_amount == Decimal("250.00")
        assert withdrawal.description.startswith("ZELLE PAYMENT TO")
        assert not withdrawal.matched

    def test_year_filter(self, config, bank_file):
        records = BankStatementParser(config).parse_file(bank_file, year=2025)

        assert len(records) == 2
        assert all(r.date.year == 2025 for r in records)

    def test_missing_columns(self, config, tmp_path):
        path = tmp_path / "bank.csv"
        path.write_text("Date,Vendor\n01/01/2025,ACME\n")

        with pytest.raises(BankParseError, match="Amount"):
            BankStatementParser(config).parse_file(path)

    def test_unreadable_file(self, config, tmp_path):
        with pytest.raises(BankParseError):
            BankStatementParser(config).parse_file(tmp_path / "absent.csv")

    def test_partial_column_mappings_fall_back_to_defaults(self, config, tmp_path):
        config.input.bank.column_mappings = {"amount": "Value"}
        path = tmp_path / "bank.csv"
        path.write_text("Date,Type,Vendor,Description,Value\n01/02/2025,Deposit,B,,20.00\n")

        records = BankStatementParser(config).parse_file(path)

        assert [(r.vendor, r.amount) for r in records] == [("B", Decimal("20.00"))]

    def test_bad_date_row_is_skipped(self, config, tmp_path):
        path = tmp_path / "bank.csv"
        path.write_text(
            "Date,Type,Vendor,Description,Amount\n"
            "invalid,Deposit,A,,10.00\n"
            "01/02/2025,Deposit,B,,20.00\n"
        )

        records = BankStatementParser(config).parse_file(path)

        assert [r.vendor for r in records] == ["B"]


class TestLedgerParser:
    """Tests for LedgerParser."""

    def test_parse_workbook(self, config, ledger_xlsx):
        records = LedgerParser(config).parse_file(ledger_xlsx)

        # Savings account, blank row and the total line without Trans # are dropped
        assert [r.transaction_id for r in records] == ["101", "102", "104"]

        deposit = records[0]
        assert deposit.date == date(2025, 1, 15)
        assert deposit.ledger_type == "Deposit"
        assert deposit.debit == Decimal("5000.00")
        assert deposit.credit == Decimal("0")
        assert deposit.memo == "Invoice 9"

        check = records[1]
        assert check.credit == Decimal("250.00")
        # Empty Name falls back to the Split column
        assert check.name == "Contractors"
        assert check.split_label == "Contractors"

        assert records[2].credit == Decimal("99.99")

    def test_year_filter(self, config, ledger_xlsx):
        records = LedgerParser(config).parse_file(ledger_xlsx, year=2025)

        assert [r.transaction_id for r in records] == ["101", "102"]

    def test_partial_column_mappings_fall_back_to_defaults(self, config, tmp_path):
        config.input.ledger.column_mappings = {"transaction_id": "Num"}
        path = tmp_path / "ledger.csv"
        path.write_text(
            "Date,Num,Type,Account,Name,Memo,Split,Debit,Credit\n"
            "01/16/2025,301,Check,Operating Account,VENDOR C,,Expenses,,9.50\n"
        )

        records = LedgerParser(config).parse_file(path)

        assert [(r.transaction_id, r.name, r.credit) for r in records] == [
            ("301", "VENDOR C", Decimal("9.50"))
        ]

    def test_no_account_filters_keeps_all_accounts(self, config, ledger_xlsx):
        config.input.ledger.account_filters = []

        records = LedgerParser(config).parse_file(ledger_xlsx)

        assert [r.transaction_id for r in records] == ["101", "102", "103", "104"]

    def test_parse_csv_export(self, config, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_text(
            "Ledger Report,,,,,,,,\n"
            "Date,Trans #,Type,Account,Name,Memo,Split,Debit,Credit\n"
            "01/15/2025,201,Deposit,Operating Account,CUSTOMER A,,Sales,\"1,200.00\",\n"
            ",,,,,,,,\n"
            "01/16/2025,202,Check,Operating Account,VENDOR B,,Expenses,,75.25\n"
        )

        records = LedgerParser(config).parse_file(path)

        assert [r.transaction_id for r in records] == ["201", "202"]
        assert records[0].debit == Decimal("1200.00")
        assert records[1].credit == Decimal("75.25")

    def test_default_header_row_when_no_marker(self, config, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_text(
            "Report,,\n"
            "Company,,\n"
            "When,Id,Kind\n"
            "01/15/2025,1,Check\n"
        )

        # Row 2 is used as the header, but it lacks the Date and Trans # columns
        with pytest.raises(LedgerParseError, match="missing columns"):
            LedgerParser(config).parse_file(path)

    def test_unreadable_file(self, config, tmp_path):
        with pytest.raises(LedgerParseError):
            LedgerParser(config).parse_file(tmp_path / "absent.xlsx")
