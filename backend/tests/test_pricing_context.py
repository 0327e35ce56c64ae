import pytest

from app.services.pricing_context import (
    PACKING_KEYS,
    breakdown_value,
    cents_from,
    context_from_booking,
    normalize_breakdown,
    parse_number,
    round_half_up,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (12, 12.0),
        ("12.5 hrs", 12.5),
        ("  7", 7.0),
        ("abc", None),
        (True, None),
        (None, None),
        (float("nan"), None),
        (float("inf"), None),
        (10**400, None),
        ({"x": 1}, None),
    ],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1666.5) == 1667
    assert round_half_up(1666.49) == 1666
    assert round_half_up("junk") == 0


def test_cents_from_currency_strings():
    assert cents_from("$1,234.50") == 123450
    assert cents_from(99) == 9900
    assert cents_from(None) == 0


def test_breakdown_value_first_present_key_wins():
    assert breakdown_value({"packing_cost_cents": 1, "packing_cost": 99}, PACKING_KEYS) == 1
    assert breakdown_value({"packingCost": "45.5"}, PACKING_KEYS) == 4550
    assert breakdown_value({}, PACKING_KEYS) == 0


def test_breakdown_value_skips_nested_values():
    breakdown = {"packing_cost_cents": {"kit": 9900}, "packing_cost": 10}
    assert breakdown_value(breakdown, PACKING_KEYS) == 1000


def test_breakdown_value_clamps_negatives():
    assert breakdown_value({"packing_cost": -5}, PACKING_KEYS) == 0


def test_legacy_dollar_keys_normalize_to_cents():
    breakdown = normalize_breakdown(
        {
            "breakdown": {
                "packingCost": "99.00",
                "destinationFee": 46,
                "storage": 150,
                "insuranceCost": "$150",
                "stairsCost": 25,
                "basePrice": 420,
            }
        }
    )
    assert breakdown.packing_cents == 9900
    assert breakdown.destination_cents == 4600
    assert breakdown.storage_cents == 15000
    assert breakdown.insurance_cents == 15000
    assert breakdown.stairs_cents == 2500
    assert breakdown.base_hourly_cents == 42000


@pytest.mark.parametrize(
    "fee,expected",
    [(46, 4600), (4600, 4600), ("$46", 4600), (-10, 0), (None, 0)],
)
def test_destination_fee_from_service_details(fee, expected):
    assert normalize_breakdown({"destination_fee": fee}).destination_cents == expected


def test_breakdown_destination_takes_precedence():
    details = {"destination_fee": 99, "breakdown": {"destination_fee_cents": 1200}}
    assert normalize_breakdown(details).destination_cents == 1200


def test_heavy_items_list_is_itemized():
    details = {
        "heavy_items": [
            {"band": "200-300", "price_cents": 5000, "count": 2},
            {"band": "300-400", "price_cents": 2500},
            {"band": "400+", "price_cents": 9000, "count": 0},
        ],
        "breakdown": {"heavy_items_cost_cents": 1},
    }
    assert normalize_breakdown(details).heavy_items_cents == 12500


def test_heavy_items_fall_back_to_breakdown():
    details = {"heavy_items": [], "breakdown": {"heavy_items_cost": 75}}
    assert normalize_breakdown(details).heavy_items_cents == 7500


def test_context_reads_crew_size_and_dollar_rate():
    context = context_from_booking(
        {
            "hourly_rate_cents": None,
            "service_details": {"crew_size": 3, "hourly_rate": 150, "hourly_rate_is_team_rate": "true"},
        }
    )
    assert context.movers == 3
    assert context.hourly_rate_cents == 15000
    assert context.is_team_rate is None
    assert context.estimated_hours == 3


def test_context_prefers_booking_columns():
    context = context_from_booking(
        {
            "hourly_rate_cents": 20000,
            "estimated_duration_hours": 4.5,
            "additional_fees_cents": -300,
            "service_details": {
                "mover_team": 4,
                "hourly_rate_cents": 1,
                "estimated_duration_hours": 9,
                "packing": "kit",
                "stairs_flights": "2",
            },
        }
    )
    assert context.movers == 4
    assert context.hourly_rate_cents == 20000
    assert context.estimated_hours == 4.5
    assert context.additional_fees_cents == 0
    assert context.packing_requested is True
    assert context.stairs_flights == 2


def test_context_ignores_non_mapping_service_details():
    context = context_from_booking({"service_details": "not-json"})
    assert context.movers == 0
    assert context.hourly_rate_cents == 0
    assert context.packing_requested is False
