"""Deterministic demo data served when the upstream API is unavailable.

Records are written in the upstream's raw shape and pushed through the same
normalizer/aggregator/transformer as live data, so mock and live responses
are indistinguishable in structure. Timestamps are fixed epoch seconds.
"""
from __future__ import annotations

from src.models.entities import TrafficBundle
from src.services.normalizer import (
    normalize_advertiser,
    normalize_affiliate,
    normalize_affiliate_offer,
    normalize_blocked_source,
    normalize_blocked_variable,
    normalize_coupon_code,
    normalize_deal,
    normalize_offer,
    normalize_traffic_control,
)

DAY = 86400
# 2025-01-15T00:00:00Z, the reference "now" for every mock timestamp
REFERENCE_EPOCH = 1736899200


def _days_ago(days: float) -> int:
    return int(REFERENCE_EPOCH - days * DAY)


# ── Network offers ──────────────────────────────────────

RAW_OFFERS = [
    {
        "network_offer_id": 1, "name": "Mobile Gaming CPA - iOS", "offer_status": "active",
        "currency_id": "USD", "default_payout": 25.00, "default_revenue": 35.00,
        "preview_url": "https://example.com/mobile-gaming", "offer_url": "https://track.example.com/click/1",
        "advertiser": {"network_advertiser_id": 1, "name": "GameCorp Inc."},
        "category": "Gaming", "countries": ["US", "CA", "GB"],
        "description": "Premium mobile gaming app with high conversion rates",
        "time_created": _days_ago(30), "time_saved": _days_ago(1),
    },
    {
        "network_offer_id": 2, "name": "E-commerce Fashion - RevShare", "offer_status": "active",
        "currency_id": "USD", "default_payout": 15.00, "default_revenue": 25.00,
        "preview_url": "https://example.com/fashion-store", "offer_url": "https://track.example.com/click/2",
        "advertiser": {"network_advertiser_id": 2, "name": "Fashion Forward LLC"},
        "category": "Fashion", "countries": ["US", "CA", "AU"],
        "description": "Trendy fashion e-commerce with high AOV",
        "time_created": _days_ago(20), "time_saved": _days_ago(2),
    },
    {
        "network_offer_id": 3, "name": "Financial Services Lead Gen", "offer_status": "active",
        "currency_id": "USD", "default_payout": 45.00, "default_revenue": 65.00,
        "preview_url": "https://example.com/finance-leads", "offer_url": "https://track.example.com/click/3",
        "advertiser": {"network_advertiser_id": 3, "name": "FinTech Solutions"},
        "category": "Finance", "countries": ["US"],
        "description": "High-quality financial services lead generation",
        "time_created": _days_ago(15), "time_saved": _days_ago(3),
    },
    {
        "network_offer_id": 4, "name": "Health & Wellness CPL", "offer_status": "paused",
        "currency_id": "USD", "default_payout": 12.50, "default_revenue": 20.00,
        "preview_url": "https://example.com/health-wellness", "offer_url": "https://track.example.com/click/4",
        "advertiser": {"network_advertiser_id": 4, "name": "WellBeing Corp"},
        "category": "Health", "countries": ["US", "CA"],
        "description": "Health and wellness cost per lead campaign",
        "time_created": _days_ago(45), "time_saved": _days_ago(5),
    },
    {
        "network_offer_id": 5, "name": "Travel Booking CPS", "offer_status": "active",
        "currency_id": "USD", "default_payout": 8.00, "default_revenue": 12.00,
        "preview_url": "https://example.com/travel-booking", "offer_url": "https://track.example.com/click/5",
        "advertiser": {"network_advertiser_id": 5, "name": "TravelMax Agency"},
        "category": "Travel", "countries": ["US", "CA", "GB", "AU"],
        "description": "Global travel booking with competitive commissions",
        "time_created": _days_ago(10), "time_saved": _days_ago(1),
    },
]


# ── Affiliate-side offers ───────────────────────────────


def _affiliate_offer(offer_id, name, category, description, status, payout, payout_type,
                     visibility, affiliate_status, countries, caps, reporting, creatives):
    daily_conv, weekly_conv, monthly_conv, global_conv, daily_payout, rem_payout, rem_conv = caps
    return {
        "network_offer_id": offer_id, "name": name, "offer_status": status,
        "html_description": description, "visibility": visibility,
        "tracking_url": f"https://track.example.com/affiliate/{offer_id}",
        "thumbnail_url": "", "currency_id": "USD",
        "time_created": _days_ago(30 - offer_id * 3), "time_saved": _days_ago(1),
        "daily_conversion_cap": daily_conv, "weekly_conversion_cap": weekly_conv,
        "monthly_conversion_cap": monthly_conv, "global_conversion_cap": global_conv,
        "daily_payout_cap": daily_payout,
        "relationship": {
            "offer_affiliate_status": affiliate_status,
            "category": {"name": category},
            "payouts": {"total": 1, "entries": [
                {"payout_type": payout_type, "payout_amount": payout, "is_default": True},
            ]},
            "ruleset": {
                "countries": countries, "platforms": ["desktop", "mobile"],
                "device_types": ["smartphone", "tablet", "desktop"], "languages": ["en"],
            },
            "reporting": dict(zip(("imp", "total_click", "cv", "revenue", "cvr"), reporting)),
            "creatives": {"total": creatives},
            "remaining_caps": {
                "remaining_daily_payout_cap": rem_payout,
                "remaining_daily_conversion_cap": rem_conv,
            },
        },
    }


RAW_AFFILIATE_OFFERS = [
    _affiliate_offer(
        1, "Premium Finance Offer - CPA", "Finance",
        "High-converting finance offer with <b>excellent payouts</b> and proven conversion rates.",
        "active", 25.00, "cpa", "public", "approved", ["US", "CA", "UK"],
        (100, 500, 2000, 10000, 2500, 1200, 45), (15420, 1241, 89, 2225.00, 7.17), 5,
    ),
    _affiliate_offer(
        2, "Health & Wellness RevShare", "Health",
        "Top-performing health supplements campaign with revenue sharing model.",
        "active", 15.00, "revshare", "public", "approved", ["US", "CA", "AU"],
        (75, 400, 1500, 8000, 1125, 890, 30), (12300, 980, 62, 930.00, 6.33), 8,
    ),
    _affiliate_offer(
        3, "Tech Gadgets CPL Campaign", "Technology",
        "Lead generation for the latest tech gadgets and consumer electronics.",
        "paused", 8.50, "cpl", "private", "pending", ["US"],
        (200, 1000, 4000, 20000, 1700, 0, 0), (8900, 720, 41, 348.50, 5.69), 3,
    ),
    _affiliate_offer(
        4, "Travel Booking Commission", "Travel",
        "Global travel booking platform with commission-based payouts and worldwide coverage.",
        "active", 12.75, "cpc", "public", "approved", ["US", "CA", "GB", "AU", "DE"],
        (150, 750, 3000, 15000, 1912, 1456, 112), (21050, 1530, 96, 1224.00, 6.27), 6,
    ),
    _affiliate_offer(
        5, "Crypto Exchange CPA", "Finance",
        "Cryptocurrency exchange sign-ups with verified KYC.",
        "active", 45.00, "cpa", "public", "approved", ["US", "CA"],
        (50, 250, 1000, 5000, 2250, 1575, 35), (9800, 610, 28, 1260.00, 4.59), 4,
    ),
]


# ── Affiliates & advertisers ────────────────────────────

RAW_AFFILIATES = [
    {
        "network_affiliate_id": 1, "name": "Premium Media Group", "account_status": "active",
        "account_manager_id": 1, "account_manager_name": "John Smith", "today_revenue": "$125.50",
        "time_created": _days_ago(30), "time_saved": _days_ago(1), "labels": ["media_buyer", "premium"],
        "balance": 2500.00, "last_login": _days_ago(1 / 24), "is_payable": True, "payment_type": "wire",
    },
    {
        "network_affiliate_id": 2, "name": "Digital Marketing Solutions", "account_status": "active",
        "account_manager_id": 2, "account_manager_name": "Sarah Johnson", "today_revenue": "$89.25",
        "time_created": _days_ago(45), "time_saved": _days_ago(2), "labels": ["agency", "performance"],
        "balance": 1850.75, "last_login": _days_ago(2 / 24), "is_payable": True, "payment_type": "paypal",
    },
    {
        "network_affiliate_id": 3, "name": "Global Affiliate Network", "account_status": "inactive",
        "account_manager_id": 1, "account_manager_name": "John Smith", "today_revenue": "$0.00",
        "time_created": _days_ago(60), "time_saved": _days_ago(15), "labels": ["network"],
        "balance": 0.00, "last_login": _days_ago(10), "is_payable": False, "payment_type": "none",
    },
    {
        "network_affiliate_id": 4, "name": "Social Media Experts", "account_status": "active",
        "account_manager_id": 3, "account_manager_name": "Mike Davis", "today_revenue": "$1,234.80",
        "time_created": _days_ago(20), "time_saved": _days_ago(1 / 24), "labels": ["social", "influencer"],
        "balance": 3200.50, "last_login": _days_ago(0.5 / 24), "is_payable": True, "payment_type": "wire",
    },
    {
        "network_affiliate_id": 5, "name": "Mobile App Promoters", "account_status": "active",
        "account_manager_id": 2, "account_manager_name": "Sarah Johnson", "today_revenue": "$67.15",
        "time_created": _days_ago(90), "time_saved": _days_ago(3), "labels": ["mobile", "app"],
        "balance": 1100.25, "last_login": _days_ago(4 / 24), "is_payable": True, "payment_type": "check",
    },
]

RAW_ADVERTISERS = [
    {
        "network_advertiser_id": advertiser_id, "name": name, "account_status": status,
        "account_manager_name": manager, "sales_manager_name": sales, "today_revenue": revenue,
        "default_currency_id": "USD", "labels": labels,
        "time_created": _days_ago(age), "time_saved": _days_ago(1),
    }
    for advertiser_id, name, status, manager, sales, revenue, labels, age in (
        (1, "GameCorp Inc.", "active", "John Smith", "Laura Chen", "$2,410.00", ["gaming"], 120),
        (2, "Fashion Forward LLC", "active", "Sarah Johnson", "Laura Chen", "$980.40", ["retail"], 95),
        (3, "FinTech Solutions", "active", "Mike Davis", "Omar Haddad", "$3,875.25", ["finance", "premium"], 60),
        (4, "WellBeing Corp", "inactive", "John Smith", "Omar Haddad", "$0.00", ["health"], 200),
        (5, "TravelMax Agency", "active", "Sarah Johnson", "Laura Chen", "$512.90", [], 30),
    )
]


# ── Deals & coupon codes ────────────────────────────────

RAW_DEALS = [
    {
        "network_advertiser_deal_id": 1, "name": "Summer Sale - 25% Off", "brand_name": "TechStore Pro",
        "deal_type": "coupon", "deal_status": "active",
        "deal_categories": ["computers-accessories-tablets", "computers-accessories-software"],
        "description": "Get 25% off on all tech products this summer",
        "restrictions": "Valid for new customers only. Cannot be combined with other offers.",
        "scope": "entire_store", "coupon_code": "SUMMER25",
        "coupon_code_discount_percentage": 25, "coupon_code_discount_amount": 0,
        "coupon_code_discount_currency_id": "USD",
        "threshold_quantity": 0, "threshold_amount": 100,
        "purchase_limit_quantity": 0, "purchase_limit_amount": 500,
        "date_valid_from": _days_ago(1), "date_valid_to": _days_ago(-30),
        "relationship": {
            "deal_products": [
                {
                    "network_advertiser_deal_product_id": 1, "product_name": "Gaming Laptop",
                    "product_url": "https://example.com/gaming-laptop", "before_discount_price": 1299,
                    "after_discount_price": 974, "retail_price": 1399, "discount_percentage": 25,
                    "price_currency_id": "USD",
                },
                {
                    "network_advertiser_deal_product_id": 2, "product_name": "Wireless Mouse",
                    "product_url": "https://example.com/wireless-mouse", "before_discount_price": 79,
                    "after_discount_price": 59, "retail_price": 89, "discount_percentage": 25,
                    "price_currency_id": "USD",
                },
            ],
            "offers": [{
                "network_offer_id": 1, "name": "TechStore Affiliate Program", "offer_status": "active",
                "tracking_url": "https://tracking.example.com/click/1",
            }],
        },
        "time_created": _days_ago(1), "time_saved": REFERENCE_EPOCH,
    },
    {
        "network_advertiser_deal_id": 2, "name": "Free Shipping Weekend", "brand_name": "FashionHub",
        "deal_type": "freeshipping", "deal_status": "active", "deal_categories": ["apparel-clothing-shoes"],
        "description": "Free shipping on all orders this weekend", "restrictions": "Minimum order value $50",
        "scope": "entire_store", "coupon_code": "FREESHIP",
        "coupon_code_discount_percentage": 0, "coupon_code_discount_amount": 0,
        "coupon_code_discount_currency_id": "USD",
        "threshold_quantity": 0, "threshold_amount": 50,
        "purchase_limit_quantity": 0, "purchase_limit_amount": 0,
        "date_valid_from": REFERENCE_EPOCH, "date_valid_to": _days_ago(-2),
        "relationship": {"offers": [{
            "network_offer_id": 2, "name": "Fashion Hub Affiliate", "offer_status": "active",
            "tracking_url": "https://tracking.example.com/click/2",
        }]},
        "time_created": _days_ago(1 / 24), "time_saved": REFERENCE_EPOCH,
    },
    {
        "network_advertiser_deal_id": 3, "name": "Buy 2 Get 1 Free", "brand_name": "BookWorld",
        "deal_type": "bogo", "deal_status": "active", "deal_categories": ["books-media-entertainment"],
        "description": "Buy any 2 books and get the 3rd one free",
        "restrictions": "Applies to books under $30 only",
        "scope": "category", "coupon_code": "B2G1FREE",
        "coupon_code_discount_percentage": 0, "coupon_code_discount_amount": 0,
        "coupon_code_discount_currency_id": "USD",
        "threshold_quantity": 2, "threshold_amount": 0,
        "purchase_limit_quantity": 6, "purchase_limit_amount": 0,
        "date_valid_from": _days_ago(2), "date_valid_to": _days_ago(-7),
        "relationship": {"offers": [{
            "network_offer_id": 3, "name": "BookWorld Partnership", "offer_status": "active",
            "tracking_url": "https://tracking.example.com/click/3",
        }]},
        "time_created": _days_ago(2), "time_saved": REFERENCE_EPOCH,
    },
]

RAW_COUPON_CODES = [
    {
        "network_coupon_code_id": coupon_id, "network_offer_id": offer_id, "coupon_code": code,
        "coupon_status": "active", "tracking_link": f"https://tracking.example.com/coupon/{code}/",
        "start_date": start, "end_date": end, "description": description,
        "is_description_plain_text": plain, "time_created": created, "time_saved": 1737590006,
        "relationship": {"offer": {"network_offer_id": offer_id, "name": offer_name, "offer_status": "active"}},
    }
    for coupon_id, offer_id, code, start, end, description, plain, created, offer_name in (
        (132, 16, "WINTER25", "2025-01-01", "2025-06-01", "25% off on all winter jackets",
         True, 1585177030, "Winter Jackets"),
        (152, 18, "PANTS35", "", "", "35$ off on <strong>dress pants</strong> at all times",
         False, 1586909228, "Dress Pants"),
        (167, 22, "FREESHIP50", "2025-01-01", "2025-12-31", "Free shipping on orders over $50",
         True, 1640995200, "Fashion Store"),
        (189, 25, "TECH15", "2025-09-01", "2025-09-30",
         "15% discount on all <em>tech gadgets</em> and accessories", False, 1693516800, "Tech Gadgets Pro"),
        (201, 28, "NEWUSER20", "", "", "20% off for new customers on their first purchase",
         True, 1704067200, "Online Marketplace"),
    )
]


# ── Traffic ─────────────────────────────────────────────

RAW_TRAFFIC_CONTROLS = [
    {
        "network_traffic_control_id": 1, "status": "active", "is_apply_all_offers": True,
        "control_type": "blacklist", "date_valid_from": "", "date_valid_to": "",
        "comparison_method": "contains", "variables": ["source_id", "sub_id"],
        "relationship": {"name": "Block Spam Traffic", "description": "Blocks suspicious traffic sources"},
    },
    {
        "network_traffic_control_id": 2, "status": "active", "is_apply_all_offers": False,
        "control_type": "blacklist", "date_valid_from": "2025-01-08T00:00:00.000Z",
        "date_valid_to": "2025-02-14T00:00:00.000Z", "comparison_method": "exact", "variables": ["country"],
        "relationship": {"name": "Geo Restrictions", "description": "Blocks traffic from restricted countries"},
    },
    {
        "network_traffic_control_id": 3, "status": "inactive", "is_apply_all_offers": False,
        "control_type": "whitelist", "date_valid_from": "", "date_valid_to": "",
        "comparison_method": "regex", "variables": ["user_agent"],
        "relationship": {"name": "Mobile Only", "description": "Only allows mobile traffic"},
    },
]

RAW_BLOCKED_SOURCES = [
    {"network_offer_id": 1, "sub_id": "spam_source_123", "traffic_blocking_status": "blocked",
     "time_created": _days_ago(3), "time_saved": _days_ago(3), "offer_name": "Premium Finance Offer"},
    {"network_offer_id": 2, "sub_id": "low_quality_456", "traffic_blocking_status": "blocked",
     "time_created": _days_ago(7), "time_saved": _days_ago(2), "offer_name": "Health & Wellness CPA"},
    {"network_offer_id": 1, "sub_id": "bot_traffic_789", "traffic_blocking_status": "blocked",
     "time_created": _days_ago(1), "time_saved": _days_ago(1), "offer_name": "Premium Finance Offer"},
]

RAW_BLOCKED_VARIABLES = [
    {"variable": "source_id", "value": "spam123", "operator": "contains"},
    {"variable": "country", "value": "XX", "operator": "exact"},
    {"variable": "user_agent", "value": "bot", "operator": "contains"},
    {"variable": "ip_address", "value": "192.168.1.100", "operator": "exact"},
]


# ── Conversions & reporting ─────────────────────────────

_OFFER_REFS = {o["network_offer_id"]: o["name"] for o in RAW_OFFERS}
_AFFILIATE_REFS = {a["network_affiliate_id"]: a["name"] for a in RAW_AFFILIATES}


def _conversion(n: int, offer_id: int, affiliate_id: int, revenue: float, payout: float,
                hours_ago: float, country: str = "US") -> dict:
    advertiser = RAW_OFFERS[offer_id - 1]["advertiser"]
    return {
        "conversion_id": f"mock-cv-{n:03d}", "conversion_status": "approved",
        "conversion_unix_timestamp": _days_ago(hours_ago / 24),
        "revenue": revenue, "payout": payout, "country": country,
        "sub1": f"sub-{affiliate_id}", "transaction_id": f"tx-{n:05d}",
        "relationship": {
            "offer": {"network_offer_id": offer_id, "name": _OFFER_REFS[offer_id]},
            "affiliate": {"network_affiliate_id": affiliate_id, "name": _AFFILIATE_REFS[affiliate_id]},
            "advertiser": dict(advertiser),
        },
    }


RAW_CONVERSIONS = [
    _conversion(1, 3, 1, 65.00, 45.00, 2),
    _conversion(2, 3, 4, 65.00, 45.00, 5),
    _conversion(3, 1, 1, 35.00, 25.00, 7, "CA"),
    _conversion(4, 3, 2, 65.00, 45.00, 11),
    _conversion(5, 2, 4, 25.00, 15.00, 13, "AU"),
    _conversion(6, 1, 5, 35.00, 25.00, 20),
    _conversion(7, 5, 2, 12.00, 8.00, 26, "GB"),
    _conversion(8, 4, 5, 20.00, 12.50, 30),
    _conversion(9, 1, 4, 35.00, 25.00, 33),
    _conversion(10, 2, 1, 25.00, 15.00, 40),
    _conversion(11, 5, 5, 12.00, 8.00, 44, "AU"),
    _conversion(12, 3, 4, 65.00, 45.00, 50),
]


def _reporting_row(offer_id, affiliate_id, imp, clicks, unique, cv, revenue, payout):
    return {
        "columns": [
            {"column_type": "offer", "id": str(offer_id), "label": _OFFER_REFS[offer_id]},
            {"column_type": "affiliate", "id": str(affiliate_id), "label": _AFFILIATE_REFS[affiliate_id]},
        ],
        "reporting": {
            "imp": imp, "total_click": clicks, "unique_click": unique, "cv": cv,
            "revenue": revenue, "payout": payout, "profit": round(revenue - payout, 2),
            "gross_sales": round(revenue * 3.2, 2), "media_buying_cost": 0,
        },
    }


RAW_REPORTING_TABLE = {
    "table": [
        _reporting_row(3, 4, 18200, 1420, 1310, 62, 4030.00, 2790.00),
        _reporting_row(1, 1, 25400, 2210, 1985, 88, 3080.00, 2200.00),
        _reporting_row(2, 4, 14100, 1180, 1022, 47, 1175.00, 705.00),
        _reporting_row(5, 2, 9800, 860, 790, 31, 372.00, 248.00),
        _reporting_row(4, 5, 0, 0, 0, 0, 0.00, 0.00),
    ],
}

RAW_REPORTING_SUMMARY = {
    "imp": 67500, "total_click": 5670, "unique_click": 5107, "cv": 228, "cvr": 4.0211,
    "revenue": 8657.00, "payout": 5943.00, "profit": 2714.00, "gross_sales": 27702.40,
    "media_buying_cost": 0,
}

FALLBACK_DASHBOARD_SUMMARY = {
    "totalProfit": 12450,
    "totalRevenue": 41500,
    "totalConversions": 342,
    "profitMargin": 30.0,
    "trends": {"profit": 8.5, "revenue": 5.2, "conversions": 12.1, "margin": 2.3},
}


# ── Normalized views ────────────────────────────────────

MOCK_OFFERS = [normalize_offer(r) for r in RAW_OFFERS]
MOCK_AFFILIATE_OFFERS = [normalize_affiliate_offer(r) for r in RAW_AFFILIATE_OFFERS]
MOCK_AFFILIATES = [normalize_affiliate(r) for r in RAW_AFFILIATES]
MOCK_ADVERTISERS = [normalize_advertiser(r) for r in RAW_ADVERTISERS]
MOCK_DEALS = [normalize_deal(r) for r in RAW_DEALS]
MOCK_COUPON_CODES = [normalize_coupon_code(r) for r in RAW_COUPON_CODES]
MOCK_TRAFFIC = TrafficBundle(
    traffic_controls=[normalize_traffic_control(r) for r in RAW_TRAFFIC_CONTROLS],
    blocked_sources=[normalize_blocked_source(r) for r in RAW_BLOCKED_SOURCES],
    blocked_variables=[normalize_blocked_variable(r) for r in RAW_BLOCKED_VARIABLES],
)
