import logging


def test_validation_errors_are_logged_and_listed(client, caplog):
    with caplog.at_level(logging.WARNING, logger="app.main"):
        res = client.post("/api/v1/movers/quotes/calculate", json={"mover_team": 20})

    assert res.status_code == 422
    assert any(err["loc"][-1] == "mover_team" for err in res.json()["detail"])
    assert "Validation error" in caplog.text


def test_value_error_details_are_serializable(client, make_profile, auth_header):
    res = client.post(
        "/api/v1/bookings/",
        json={"business_id": 1, "move_date": "soon", "details": {}},
        headers=auth_header(make_profile()),
    )
    assert res.status_code == 422
    assert "Invalid date format" in res.json()["detail"][0]["msg"]
