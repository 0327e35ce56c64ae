import logging

from app.utils import error_response


def test_error_response_structure_and_logging(caplog):
    with caplog.at_level(logging.ERROR, logger="app.utils.errors"):
        exc = error_response("Business not found", {"business_id": "not_found"}, 404)

    assert exc.status_code == 404
    assert exc.detail == {
        "message": "Business not found",
        "field_errors": {"business_id": "not_found"},
    }
    assert "Business not found" in caplog.text


def test_error_response_defaults_to_422():
    exc = error_response("Invalid input")
    assert exc.status_code == 422
    assert exc.detail["field_errors"] == {}
