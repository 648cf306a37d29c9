import pytest

from src.error_handler import ErrorHandler
from src.quotes.errors import (
    CountryNotFound,
    DataLoadFailure,
    InvalidAction,
    InvalidInput,
    ProviderUnavailable,
    RecordNotFound,
)


@pytest.mark.parametrize(
    "exc,status",
    [
        (CountryNotFound("no"), 404),
        (RecordNotFound("no"), 404),
        (ProviderUnavailable("down"), 502),
        (InvalidAction("bad"), 400),
        (InvalidInput("bad"), 400),
        (DataLoadFailure("broken"), 503),
        (RuntimeError("boom"), 500),
    ],
)
def test_status_codes(exc, status):
    assert ErrorHandler().status_code(exc) == status


def test_eor_error_body_includes_payload():
    exc = CountryNotFound(
        "Country ZZ not found for provider deel",
        payload={"requested_country": "ZZ", "available_countries": ["US"]},
    )

    status, body = ErrorHandler().handle_exception(exc)

    assert status == 404
    assert body == {
        "error": "Country not found",
        "message": "Country ZZ not found for provider deel",
        "requested_country": "ZZ",
        "available_countries": ["US"],
    }


def test_handle_exception_returns_payload():
    status, out = ErrorHandler().handle_exception(Exception("boom"), context={"k": "v"})
    assert status == 500
    assert "internal error" in out["message"].lower()
    assert "boom" in out["metadata"]["error"]
    assert out["metadata"]["context"] == {"k": "v"}
