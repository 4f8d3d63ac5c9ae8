"""
Tests for the Google Sheets and Firebase adapters.

No real API calls: the worksheet and the HTTP session are replaced with
in-process fakes.
"""

import datetime as dt
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from fintrax.config import FirebaseSettings
from fintrax.errors import NotFoundError
from fintrax.models import AuditEventBuilder, AuditEventType
from fintrax.services.identity import FirebaseIdentityProvider, IdentityError
from fintrax.services.identity.firebase import translate_rest_error
from fintrax.services.storage import (
    EXPENSE_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsExpenseRepository,
    MalformedDocumentError,
    StorageError,
    decode_expense,
)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the repository."""

    def __init__(self, header):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))

    def update(self, range_name=None, values=None):
        row_number = int(range_name.split(":")[0][1:])
        self.rows[row_number - 1] = list(values[0])

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.expenses = FakeWorksheet(EXPENSE_COLUMNS)
        self.audit = FakeWorksheet([])

    def get_expenses_sheet(self):
        return self.expenses

    def get_audit_sheet(self):
        return self.audit


class LostResponseWorksheet(FakeWorksheet):
    """Stores the appended row, then fails as if the reply was lost."""

    def append_row(self, row, value_input_option=None):
        super().append_row(row, value_input_option)
        raise TimeoutError("response lost")


class RejectingWorksheet(FakeWorksheet):
    def append_row(self, row, value_input_option=None):
        raise TimeoutError("write rejected")


FIELDS = {
    "title": "Lunch",
    "amount": Decimal("15.00"),
    "category": "Food",
    "date": dt.date(2024, 1, 10),
    "notes": "",
}


class TestGoogleSheetsExpenseRepository:
    """Tests for the Sheets-backed expense collection."""

    @pytest.fixture
    def client(self):
        return FakeSheetsClient()

    @pytest.fixture
    def repository(self, client):
        return GoogleSheetsExpenseRepository(client)

    async def test_insert_assigns_id_and_timestamp(self, repository, client):
        document = await repository.insert("user-a", FIELDS)
        assert document["id"]
        assert document["owner_id"] == "user-a"
        assert len(client.expenses.rows) == 2

        expense = decode_expense(document)
        assert expense.amount == Decimal("15.00")
        assert expense.date == dt.date(2024, 1, 10)
        assert expense.created_at.tzinfo is not None

    async def test_query_by_owner(self, repository):
        await repository.insert("user-a", FIELDS)
        await repository.insert("user-b", FIELDS)
        await repository.insert("user-a", {**FIELDS, "title": "Dinner"})

        documents = await repository.query_by_owner("user-a")
        assert [d["title"] for d in documents] == ["Lunch", "Dinner"]

    async def test_get(self, repository):
        document = await repository.insert("user-a", FIELDS)
        assert (await repository.get(document["id"]))["title"] == "Lunch"
        assert await repository.get("missing") is None

    async def test_update_never_touches_identity_columns(self, repository):
        document = await repository.insert("user-a", FIELDS)
        updated = await repository.update(
            document["id"],
            {"title": "Brunch", "owner_id": "user-b", "created_at": "1999-01-01"},
        )
        assert updated["title"] == "Brunch"
        assert updated["owner_id"] == "user-a"
        assert updated["created_at"] == document["created_at"]

    async def test_insert_lost_response_writes_one_row(self, client):
        """A write that landed before the error is returned, not repeated."""
        client.expenses = LostResponseWorksheet(EXPENSE_COLUMNS)
        repository = GoogleSheetsExpenseRepository(client)

        document = await repository.insert("alice", FIELDS)

        documents = await repository.query_by_owner("alice")
        assert len(documents) == 1
        assert documents[0]["id"] == document["id"]
        assert documents[0]["title"] == "Lunch"

    async def test_insert_failure_raises_without_writing(self, client):
        client.expenses = RejectingWorksheet(EXPENSE_COLUMNS)
        repository = GoogleSheetsExpenseRepository(client)

        with pytest.raises(StorageError):
            await repository.insert("alice", FIELDS)
        assert await repository.query_by_owner("alice") == []

    async def test_update_and_delete_unknown(self, repository):
        with pytest.raises(NotFoundError):
            await repository.update("missing", {"title": "x"})
        with pytest.raises(NotFoundError):
            await repository.delete("missing")

    async def test_delete(self, repository):
        first = await repository.insert("user-a", FIELDS)
        second = await repository.insert("user-a", FIELDS)
        await repository.delete(first["id"])
        assert [d["id"] for d in await repository.query_by_owner("user-a")] == [second["id"]]

    async def test_audit_round_trip(self, client):
        storage = GoogleSheetsAuditStorage(client)
        event = AuditEventBuilder.expense_deleted("exp-1", "user-a")
        assert await storage.append_event(event)

        events = await storage.get_recent_events()
        assert events[0].event_type == AuditEventType.EXPENSE_DELETED
        assert events[0].entity_id == "exp-1"


class TestDecodeExpense:
    """Tests for the schema decoder at the persistence boundary."""

    def test_rejects_non_dict(self):
        with pytest.raises(MalformedDocumentError):
            decode_expense(["not", "a", "dict"])

    def test_reports_document_id(self):
        with pytest.raises(MalformedDocumentError) as exc_info:
            decode_expense({"id": "doc-1", "owner_id": "u", "created_at": "2024-01-01T00:00:00Z",
                            "title": "", "amount": "5", "category": "Food", "date": "2024-01-01"})
        assert exc_info.value.document_id == "doc-1"
        assert "title" in str(exc_info.value)


def response(status: int, body: dict):
    mock = MagicMock()
    mock.ok = status < 400
    mock.status_code = status
    mock.json.return_value = body
    return mock


class TestFirebaseIdentityProvider:
    """Tests for the Identity Toolkit REST adapter."""

    @pytest.fixture
    def http(self):
        return MagicMock()

    @pytest.fixture
    def provider(self, http):
        settings = FirebaseSettings(api_key="test-key")
        return FirebaseIdentityProvider(settings=settings, session=http)

    async def test_sign_in(self, provider, http):
        http.post.return_value = response(200, {
            "localId": "uid-1",
            "email": "ada@example.com",
            "idToken": "token-1",
        })
        identity = await provider.sign_in("ada@example.com", "Secret#123")

        assert identity.uid == "uid-1"
        assert provider.current_identity() == identity
        url = http.post.call_args.args[0]
        assert url.endswith("/accounts:signInWithPassword")
        assert http.post.call_args.kwargs["params"] == {"key": "test-key"}

    async def test_rejection_maps_to_sdk_code(self, provider, http):
        http.post.return_value = response(400, {"error": {"code": 400, "message": "INVALID_LOGIN_CREDENTIALS"}})
        with pytest.raises(IdentityError) as exc_info:
            await provider.sign_in("ada@example.com", "wrong")
        assert exc_info.value.code == "invalid-credential"
        assert exc_info.value.user_message == "Invalid email or password"
        assert provider.current_identity() is None

    async def test_network_failure(self, provider, http):
        http.post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(IdentityError) as exc_info:
            await provider.send_password_reset("ada@example.com")
        assert exc_info.value.code == "network-request-failed"

    async def test_change_password_needs_session(self, provider):
        with pytest.raises(IdentityError) as exc_info:
            await provider.change_password("Better#456")
        assert exc_info.value.code == "requires-recent-login"

    async def test_delete_identity_signs_out(self, provider, http):
        http.post.return_value = response(200, {"localId": "uid-1", "idToken": "token-1"})
        await provider.sign_up("ada@example.com", "Secret#123")
        http.post.return_value = response(200, {})
        await provider.delete_identity()
        assert provider.current_identity() is None
        assert http.post.call_args.kwargs["json"] == {"idToken": "token-1"}

    @pytest.mark.parametrize(
        "message, code",
        [
            ("EMAIL_EXISTS", "email-already-in-use"),
            ("WEAK_PASSWORD : Password should be at least 6 characters", "weak-password"),
            ("TOO_MANY_ATTEMPTS_TRY_LATER", "too-many-requests"),
            ("SOMETHING_ELSE", "internal-error"),
        ],
    )
    def test_translate_rest_error(self, message, code):
        assert translate_rest_error(message) == code
