"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    CuraFlowError,
    InternalError,
    NotFoundError,
    ValidationError,
)


class TestCuraFlowError:
    def test_defaults(self):
        error = CuraFlowError("boom")
        assert error.message == "boom"
        assert error.code == "CuraFlowError"
        assert error.details == {}
        assert error.status_code == 500
        assert str(error) == "boom"

    def test_to_dict_exposes_only_the_message(self):
        """Codes and details stay server side."""
        error = ValidationError("bad", code="BAD_INPUT", details={"field": "email"})
        assert error.to_dict() == {"error": "bad"}


@pytest.mark.parametrize(
    "cls, status",
    [
        (ValidationError, 400),
        (AuthenticationError, 401),
        (AuthorizationError, 403),
        (NotFoundError, 404),
        (ConflictError, 409),
        (InternalError, 500),
    ],
)
def test_status_codes(cls, status):
    error = cls("x")
    assert isinstance(error, CuraFlowError)
    assert error.status_code == status
