"""Tests for raw → normalized entity mapping."""
from __future__ import annotations

from datetime import datetime

import pytest

from src.services.normalizer import (
    NORMALIZERS,
    epoch_to_iso,
    normalize_advertiser,
    normalize_affiliate,
    normalize_affiliate_offer,
    normalize_blocked_source,
    normalize_conversion,
    normalize_coupon_code,
    normalize_deal,
    normalize_offer,
    normalize_traffic_control,
    parse_currency,
    strip_html,
)


class TestParseCurrency:
    @pytest.mark.parametrize("raw,expected", [
        ("$1,234.56", 1234.56),
        ("$0.00", 0.0),
        ("12", 12.0),
        (25, 25.0),
        (7.5, 7.5),
        ("abc", 0.0),
        ("12abc", 0.0),
        ("1_000", 0.0),
        ("1e3", 0.0),
        (".5", 0.5),
        ("", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        (True, 0.0),
    ])
    def test_values(self, raw, expected):
        assert parse_currency(raw) == pytest.approx(expected)


class TestEpochToIso:
    def test_round_trip(self):
        iso = epoch_to_iso(1700000000)
        assert iso == "2023-11-14T22:13:20.000Z"
        parsed = datetime.fromisoformat(iso.replace("Z", "+00:00"))
        assert parsed.timestamp() == 1700000000

    @pytest.mark.parametrize("raw", [None, "", "soon", 0, -5, {}, float("nan")])
    def test_invalid_is_none(self, raw):
        assert epoch_to_iso(raw) is None


def test_strip_html():
    assert strip_html("35$ off on <strong>dress pants</strong>") == "35$ off on dress pants"
    assert strip_html(None) == ""


class TestOffer:
    def test_minimal_record(self):
        offer = normalize_offer({"network_offer_id": 7, "default_payout": "$25.00"})
        assert offer.id == "7"
        assert offer.name == "Unnamed Offer"
        assert offer.default_payout == 25.0
        assert offer.category == "General"
        assert offer.advertiser.name == "Unknown"

    def test_alternate_field_names(self):
        offer = normalize_offer({
            "network_offer_id": 9,
            "name": "Finance",
            "payout_amount": 40,
            "default_payout": 10,
            "revenue_amount": "$55.50",
            "destination_url": "https://dest.example.com",
            "network_advertiser_id": 3,
            "network_advertiser_name": "FinCo",
            "html_description": "<p>Great <b>offer</b></p>",
            "relationship": {"category": {"name": "Loans"}, "ruleset": {"countries": ["US"]}},
            "time_created": 1700000000,
        })
        assert offer.default_payout == 40.0
        assert offer.default_revenue == 55.5
        assert offer.preview_url == "https://dest.example.com"
        assert offer.offer_url == "https://dest.example.com"
        assert offer.advertiser.id == "3"
        assert offer.advertiser.name == "FinCo"
        assert offer.category == "Loans"
        assert offer.countries == ["US"]
        assert offer.description == "Great offer"
        assert offer.created_at == "2023-11-14T22:13:20.000Z"

    def test_tracking_url_preferred_over_destination(self):
        offer = normalize_offer({"tracking_url": "https://t", "destination_url": "https://d"})
        assert offer.offer_url == "https://t"


class TestAffiliateOffer:
    def test_default_payout_entry(self):
        offer = normalize_affiliate_offer({
            "network_offer_id": 1,
            "offer_status": "paused",
            "relationship": {"payouts": {"entries": [
                {"payout_amount": 5, "payout_type": "cpc", "is_default": False},
                {"payout_amount": 18.5, "payout_type": "cpa", "is_default": True},
            ]}},
        })
        assert offer.default_payout == 18.5
        assert offer.payout_type == "cpa"
        assert offer.status == "Paused"

    def test_no_default_payout(self):
        offer = normalize_affiliate_offer({
            "network_offer_id": 1,
            "relationship": {"payouts": {"entries": [{"payout_amount": 5, "payout_type": "cpc"}]}},
        })
        assert offer.default_payout == 0
        assert offer.payout_type == "cpa"

    def test_defaults(self):
        offer = normalize_affiliate_offer({})
        assert offer.id == "unknown"
        assert offer.status == "Inactive"
        assert offer.description == "No description available"
        assert offer.visibility == "public"
        assert offer.affiliate_status == "unknown"
        assert offer.caps.daily_conversions == 0
        assert offer.performance.clicks == 0

    def test_flattened_relationship(self):
        offer = normalize_affiliate_offer({
            "network_offer_id": 2,
            "daily_conversion_cap": 100,
            "relationship": {
                "reporting": {"imp": 10, "total_click": 5, "cv": 1, "revenue": 20, "cvr": 20.0},
                "remaining_caps": {"remaining_daily_conversion_cap": 44},
                "creatives": {"total": 3},
                "offer_affiliate_status": "approved",
                "ruleset": {"platforms": ["mobile"]},
            },
        })
        assert offer.caps.daily_conversions == 100
        assert offer.caps.remaining_daily_conversions == 44
        assert offer.performance.impressions == 10
        assert offer.performance.cvr == 20.0
        assert offer.creatives_count == 3
        assert offer.affiliate_status == "approved"
        assert offer.platforms == ["mobile"]


class TestPartners:
    def test_affiliate(self):
        aff = normalize_affiliate({
            "network_affiliate_id": 4,
            "name": "Social",
            "today_revenue": "$1,234.56",
            "time_created": 1700000000,
            "last_login": 1700003600,
        })
        assert aff.id == "4"
        assert aff.today_revenue_amount == 1234.56
        assert aff.created_date == "2023-11-14T22:13:20.000Z"
        assert aff.last_login_date == "2023-11-14T23:13:20.000Z"
        assert aff.labels == []

    def test_affiliate_bad_revenue(self):
        assert normalize_affiliate({"today_revenue": "n/a"}).today_revenue_amount == 0.0

    @pytest.mark.parametrize("raw,expected", [("false", False), ("0", False), ("true", True), (1, True), (None, False)])
    def test_affiliate_payable_flag(self, raw, expected):
        assert normalize_affiliate({"is_payable": raw}).is_payable is expected

    def test_advertiser_manager_from_relationship(self):
        adv = normalize_advertiser({
            "network_advertiser_id": 3,
            "relationship": {"account_manager": {"first_name": "Ada", "last_name": "Lee"}},
        })
        assert adv.account_manager_name == "Ada Lee"
        assert adv.name == "Unknown"


class TestDealsAndCoupons:
    def test_deal(self):
        deal = normalize_deal({
            "network_advertiser_deal_id": 1,
            "name": "Summer",
            "deal_status": "active",
            "coupon_code_discount_percentage": 25,
            "date_valid_from": 1700000000,
            "relationship": {
                "deal_products": [{"network_advertiser_deal_product_id": 9, "product_name": "Laptop",
                                   "after_discount_price": 974}],
                "offers": [{"network_offer_id": 1, "name": "Tech", "offer_status": "active"}],
            },
        })
        assert deal.status == "active"
        assert deal.discount_percentage == 25
        assert deal.valid_from == "2023-11-14T22:13:20.000Z"
        assert deal.products[0].name == "Laptop"
        assert deal.products[0].after_discount_price == 974
        assert deal.offers[0].id == "1"

    def test_coupon_html_description_stripped(self):
        coupon = normalize_coupon_code({
            "network_coupon_code_id": 152,
            "coupon_code": "PANTS35",
            "description": "35$ off on <strong>dress pants</strong>",
            "is_description_plain_text": False,
            "relationship": {"offer": {"network_offer_id": 18, "name": "Dress Pants"}},
        })
        assert coupon.name == "PANTS35"
        assert coupon.description == "35$ off on dress pants"
        assert coupon.offer.id == "18"

    def test_coupon_plain_text_kept(self):
        coupon = normalize_coupon_code({"description": "a <b> literal", "is_description_plain_text": True})
        assert coupon.description == "a <b> literal"

    def test_coupon_string_false_flag_strips_html(self):
        coupon = normalize_coupon_code({"description": "a <b>bold</b> deal", "is_description_plain_text": "false"})
        assert coupon.description == "a bold deal"

    def test_coupon_offer_without_relationship(self):
        assert normalize_coupon_code({"network_offer_id": 22}).offer.id == "22"


class TestTrafficAndConversions:
    def test_traffic_control_name_from_relationship(self):
        control = normalize_traffic_control({
            "network_traffic_control_id": 1,
            "relationship": {"name": "Block Spam", "description": "Blocks spam"},
            "variables": ["sub_id"],
        })
        assert control.name == "Block Spam"
        assert control.variables == ["sub_id"]

    def test_blocked_source(self):
        source = normalize_blocked_source({"network_offer_id": 1, "sub_id": "spam_1", "offer_name": "Fin"})
        assert source.id == "1:spam_1"
        assert source.offer.name == "Fin"

    def test_conversion_profit_computed(self):
        cv = normalize_conversion({
            "conversion_id": "abc",
            "revenue": "$65.00",
            "payout": 45,
            "relationship": {"offer": {"network_offer_id": 3, "name": "Fin"}},
        })
        assert cv.profit == pytest.approx(20.0)
        assert cv.offer.id == "3"
        assert cv.affiliate.name == "Unknown Affiliate"


class TestTotality:
    @pytest.mark.parametrize("resource", sorted(NORMALIZERS))
    @pytest.mark.parametrize("raw", [{}, None, "garbage", {"relationship": "bad", "name": None}])
    def test_identity_never_null(self, resource, raw):
        entity = NORMALIZERS[resource](raw)
        assert entity.id
        assert entity.name

    @pytest.mark.parametrize("resource", sorted(NORMALIZERS))
    def test_idempotent(self, resource):
        raw = {"network_offer_id": 5, "name": "X", "time_created": 1700000000, "revenue": "$3.00"}
        assert NORMALIZERS[resource](raw) == NORMALIZERS[resource](raw)
