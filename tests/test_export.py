import csv
import io
from datetime import datetime, UTC

from expense_tracker.models.transaction import Transaction, TransactionType
from expense_tracker.services.export_service import (
    EXPORT_COLUMNS,
    export_filename,
    export_transactions_csv,
)


def read_csv(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def make_transaction(**overrides) -> Transaction:
    fields = {
        "id": 1,
        "user_id": 10,
        "amount": 1999,
        "type": TransactionType.EXPENSE,
        "category": "food",
        "description": None,
        "transaction_date": datetime(2024, 1, 5, 12, tzinfo=UTC),
        "created_at": datetime(2024, 1, 5, 12, 30, tzinfo=UTC),
        "receipt_path": None,
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestExportTransactionsCsv:
    """Tests for the CSV serializer"""

    def test_header_only_for_empty_input(self):
        assert read_csv(export_transactions_csv([])) == [EXPORT_COLUMNS]

    def test_row_layout(self):
        rows = read_csv(export_transactions_csv([make_transaction(receipt_path="uploads/r.png")]))

        assert rows[1] == [
            "1",
            "10",
            "1999",
            "expense",
            "food",
            "",
            "2024-01-05T12:00:00+00:00",
            "2024-01-05T12:30:00+00:00",
            "uploads/r.png",
        ]

    def test_special_characters_round_trip(self):
        """Commas, quotes and line breaks survive a parse by a standard reader"""
        description = 'Dinner, drinks and "tips"\nsplit later'
        category = "eating out, weekends"

        text = export_transactions_csv(
            [make_transaction(description=description, category=category)]
        )
        row = read_csv(text)[1]

        assert row[EXPORT_COLUMNS.index("Description")] == description
        assert row[EXPORT_COLUMNS.index("Category")] == category

    def test_order_preserved(self):
        transactions = [make_transaction(id=i) for i in (5, 2, 9)]

        rows = read_csv(export_transactions_csv(transactions))

        assert [r[0] for r in rows[1:]] == ["5", "2", "9"]

    def test_timestamps_rendered_in_utc(self):
        from datetime import timedelta, timezone

        local = timezone(timedelta(hours=5))
        row = read_csv(
            export_transactions_csv(
                [make_transaction(transaction_date=datetime(2024, 1, 5, 17, tzinfo=local))]
            )
        )[1]

        assert row[EXPORT_COLUMNS.index("TransactionDate")] == "2024-01-05T12:00:00+00:00"

    def test_export_filename(self):
        assert (
            export_filename(datetime(2024, 3, 9, 7, 5, 1, tzinfo=UTC))
            == "transactions_export_20240309_070501.csv"
        )


class TestCsvExportEndpoint:
    """Tests for GET /api/admin/transactions/export/csv"""

    def test_export_requires_admin(self, client, auth_headers):
        response = client.get("/api/admin/transactions/export/csv", headers=auth_headers)

        assert response.status_code == 403

    def test_export_headers(self, client, admin_headers):
        response = client.get("/api/admin/transactions/export/csv", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment; filename=transactions_export_")
        assert disposition.endswith(".csv")
        assert read_csv(response.text) == [EXPORT_COLUMNS]

    def test_export_recovers_fields(
        self, client, user_a_headers, user_b_headers, admin_headers, create_transaction
    ):
        first = create_transaction(
            user_a_headers,
            amount=1250,
            category="food",
            description="Groceries, milk\nand bread",
            transaction_date="2024-01-05T10:00:00+00:00",
        )
        second = create_transaction(
            user_b_headers,
            amount=90000,
            type="income",
            category="salary",
            transaction_date="2024-01-20T10:00:00+00:00",
        )

        response = client.get("/api/admin/transactions/export/csv", headers=admin_headers)
        rows = read_csv(response.text)

        assert rows[0] == EXPORT_COLUMNS
        # Newest first, same order as the admin listing
        assert [r[0] for r in rows[1:]] == [str(second["id"]), str(first["id"])]
        assert rows[1][2:5] == ["90000", "income", "salary"]
        assert rows[2][2:6] == ["1250", "expense", "food", "Groceries, milk\nand bread"]

    def test_export_applies_filters(
        self, client, user_a_headers, admin_headers, create_transaction
    ):
        create_transaction(user_a_headers, category="food", transaction_date="2024-01-05T10:00:00+00:00")
        create_transaction(user_a_headers, category="rent", transaction_date="2024-01-06T10:00:00+00:00")

        response = client.get(
            "/api/admin/transactions/export/csv",
            headers=admin_headers,
            params={"start_date": "2024-01-05"},
        )
        rows = read_csv(response.text)

        assert len(rows) == 2
        assert rows[1][4] == "food"

    def test_export_invalid_filter(self, client, admin_headers):
        response = client.get(
            "/api/admin/transactions/export/csv",
            headers=admin_headers,
            params={"user_id": "abc"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid user_id format"
