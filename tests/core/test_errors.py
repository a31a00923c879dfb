"""Error hierarchy - status codes, codes and the single-key response body."""

import pytest

from book_api.core.errors import (
    BookApiError,
    ConflictError,
    DuplicateKeyError,
    ErrorCategory,
    ErrorContext,
    InternalError,
    NotFoundError,
    StoreError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error,status,code",
    [
        (ValidationError("bad input"), 400, "VALIDATION_ERROR"),
        (NotFoundError("7"), 404, "USER_NOT_FOUND"),
        (ConflictError(), 409, "EMAIL_CONFLICT"),
        (InternalError("boom"), 500, "DATABASE_ERROR"),
    ],
)
def test_status_and_code(error, status, code):
    assert isinstance(error, BookApiError)
    assert error.http_status == status
    assert error.code == code


def test_response_body_has_only_message():
    assert ValidationError("bad input").to_response() == {"message": "bad input"}


def test_not_found_names_the_id():
    error = NotFoundError(42)
    assert error.message == "User '42' not found"
    assert error.context.user_id == "42"


def test_conflict_default_message():
    assert ConflictError().message == "Email already exists"


def test_hashing_failure_keeps_underlying_text():
    error = InternalError.from_hashing(RuntimeError("no entropy"))
    assert error.message == "no entropy"
    assert error.code == "HASHING_ERROR"
    assert error.category is ErrorCategory.HASHING
    assert error.http_status == 500


def test_log_extra_carries_context():
    ctx = ErrorContext(user_id="3", operation="delete_user")
    extra = NotFoundError("3", ctx).log_extra()
    assert extra == {
        "error_code": "USER_NOT_FOUND",
        "user_id": "3",
        "operation": "delete_user",
    }


def test_duplicate_key_is_a_store_error():
    error = DuplicateKeyError("UNIQUE constraint failed: users.email", "execute")
    assert isinstance(error, StoreError)
    assert str(error) == "UNIQUE constraint failed: users.email"
    assert not isinstance(error, BookApiError)
