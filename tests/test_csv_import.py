import pytest

from app.core.errors import BadRequestError
from app.utils.csv_import import CsvMapping, import_transactions, parse_csv_date

mapping = CsvMapping(
    date_column="Date",
    description_column="Description",
    amount_column="Amount",
    type_column="Type",
    category_column="Category",
)


def test_import_valid_rows():
    content = (
        "Date,Description,Amount,Type,Category\n"
        "2025-01-05,Salary,2500,Income,Salary\n"
        "01/07/2025, Groceries ,45.20,expense,Food\n"
        "\n"
        "2025-01-09,Bus ticket,2.75,,\n"
    ).encode()

    result = import_transactions(content, mapping, "user-1")

    assert result.errors == []
    assert len(result.transactions) == 3
    salary, groceries, bus = result.transactions
    assert salary.type.value == "income"
    assert groceries.description == "Groceries"
    assert groceries.date.startswith("2025-01-07")
    assert bus.type.value == "expense"
    assert bus.category == "Uncategorized"
    assert all(txn.user_id == "user-1" for txn in result.transactions)


def test_invalid_rows_are_reported_with_row_numbers():
    content = (
        "Date,Description,Amount\n"
        "2025-01-05,Coffee,3.50\n"
        "2025-01-06,,10\n"
        "2025-01-07,Refund,-5\n"
        "not-a-date,Lunch,12\n"
        "2025-01-08,Book,12.999\n"
        "2999-01-01,Future,5\n"
    ).encode()

    result = import_transactions(content, CsvMapping(date_column="Date", description_column="Description",
                                                     amount_column="Amount"), "user-1")

    assert len(result.transactions) == 1
    assert result.errors[0] == "Row 3: Invalid description or amount"
    assert result.errors[1] == "Row 4: Invalid description or amount"
    assert result.errors[2] == "Row 5: Invalid date format"
    assert result.errors[3].startswith("Row 6:")
    assert "2 decimal places" in result.errors[3]
    assert "future" in result.errors[4]
    assert result.to_dict()["totalErrors"] == 5


def test_default_type_and_category():
    custom = CsvMapping(
        date_column="Date",
        description_column="Description",
        amount_column="Amount",
        type_column="Type",
        default_type="income",
        default_category="Side jobs",
    )
    content = b"Date,Description,Amount,Type\n2025-02-01,Gig,100,bonus\n"

    txn = import_transactions(content, custom, "user-1").transactions[0]
    assert txn.type.value == "income"
    assert txn.category == "Side jobs"


def test_error_list_is_capped():
    rows = "".join(f"2025-01-01,Row {i},abc\n" for i in range(15))
    content = ("Date,Description,Amount\n" + rows).encode()

    result = import_transactions(content, mapping, "user-1").to_dict()
    assert result["imported"] == 0
    assert len(result["errors"]) == 10
    assert result["totalErrors"] == 15


def test_empty_file_rejected():
    with pytest.raises(BadRequestError):
        import_transactions(b"Date,Description,Amount\n", mapping, "user-1")
    with pytest.raises(BadRequestError):
        import_transactions(b"", mapping, "user-1")


def test_missing_mapped_column_rejected():
    with pytest.raises(BadRequestError) as exc:
        import_transactions(b"When,What,HowMuch\n2025-01-01,Tea,2\n", mapping, "user-1")
    assert "Date" in exc.value.message


def test_parse_csv_date_formats():
    assert parse_csv_date("2025-03-04").day == 4
    assert parse_csv_date("03/04/2025").month == 3
    assert parse_csv_date("2025-03-04T10:30:00Z").hour == 10
    with pytest.raises(ValueError):
        parse_csv_date("yesterday")
