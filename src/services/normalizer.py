"""Raw upstream records → flat dashboard entities.

Upstream payloads are inconsistent: the same value can arrive under two
names, money can be a number or a "$1,234.56" string, timestamps are epoch
seconds, and most related data sits under ``relationship``. Every accessor
here is defaulted, so a record missing everything still normalizes to a
valid entity with a non-null ``id`` and ``name``.

All functions are pure; the same raw input always yields an equal entity.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

from src.models.entities import (
    Advertiser,
    Affiliate,
    AffiliateOffer,
    BlockedSource,
    BlockedVariable,
    ConversionRecord,
    CouponCode,
    Deal,
    DealOffer,
    DealProduct,
    EntityRef,
    Offer,
    OfferCaps,
    OfferPerformance,
    TrafficControl,
)

_TAG_RE = re.compile(r"<[^>]*>")
_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")


# ── Field helpers ───────────────────────────────────────


def deep_get(data: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested dicts: deep_get(raw, "relationship", "category", "name")."""
    cur = data
    for key in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(key)
        if cur is None:
            return default
    return cur


def first_present(*values: Any, default: Any = None) -> Any:
    """First value that is not None/""/0/False (mirrors ``a || b || c``)."""
    for v in values:
        if v:
            return v
    return default


def parse_currency(value: Any) -> float:
    """'$1,234.56' → 1234.56. Anything unparseable, NaN or infinite → 0.0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace("$", "").replace(",", "").strip()
        if not _NUMBER_RE.match(text):
            return 0.0
        number = float(text)
    return number if math.isfinite(number) else 0.0


def to_int(value: Any, default: int = 0) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return int(number) if math.isfinite(number) else default


def to_bool(value: Any) -> bool:
    """Real bools, or the strings "true"/"1"/"yes"; anything else is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return value == 1


def to_str(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def to_str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v is not None]


def epoch_to_iso(seconds: Any) -> Optional[str]:
    """Epoch seconds → ISO-8601 UTC with millisecond precision, or None."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float, str)):
        return None
    try:
        millis = float(seconds) * 1000
    except ValueError:
        return None
    if not math.isfinite(millis) or millis <= 0:
        return None
    try:
        dt = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def strip_html(text: Any) -> str:
    if not text:
        return ""
    return _TAG_RE.sub("", str(text)).strip()


def _as_dict(raw: Any) -> dict:
    return raw if isinstance(raw, dict) else {}


def _ref(raw: Any, id_key: str, default_name: str = "Unknown") -> EntityRef:
    raw = _as_dict(raw)
    return EntityRef(
        id=to_str(raw.get(id_key), "unknown"),
        name=to_str(raw.get("name"), default_name),
    )


def default_payout_entry(raw: dict) -> dict:
    """The payout entry flagged ``is_default`` under relationship.payouts, or {}."""
    entries = deep_get(raw, "relationship", "payouts", "entries", default=[])
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, dict) and entry.get("is_default"):
                return entry
    return {}


# ── Offers ──────────────────────────────────────────────


def normalize_offer(raw: Any) -> Offer:
    raw = _as_dict(raw)
    advertiser = raw.get("advertiser")
    if isinstance(advertiser, dict):
        advertiser_ref = _ref(advertiser, "network_advertiser_id")
    else:
        advertiser_ref = EntityRef(
            id=to_str(raw.get("network_advertiser_id"), "unknown"),
            name=to_str(raw.get("network_advertiser_name"), "Unknown"),
        )

    return Offer(
        id=to_str(raw.get("network_offer_id"), "unknown"),
        name=to_str(raw.get("name"), "Unnamed Offer"),
        status=to_str(raw.get("offer_status")),
        currency_id=to_str(raw.get("currency_id"), "USD"),
        default_payout=parse_currency(first_present(raw.get("payout_amount"), raw.get("default_payout"))),
        default_revenue=parse_currency(first_present(raw.get("revenue_amount"), raw.get("default_revenue"))),
        preview_url=to_str(first_present(raw.get("preview_url"), raw.get("destination_url"))),
        offer_url=to_str(first_present(
            raw.get("offer_url"), raw.get("tracking_url"), raw.get("destination_url"),
        )),
        advertiser=advertiser_ref,
        category=to_str(first_present(
            raw.get("category"), deep_get(raw, "relationship", "category", "name"),
        ), "General"),
        countries=to_str_list(first_present(
            raw.get("countries"), deep_get(raw, "relationship", "ruleset", "countries"),
        )),
        visibility=to_str(first_present(raw.get("visibility"), deep_get(raw, "relationship", "visibility", "type"))),
        description=strip_html(first_present(raw.get("html_description"), raw.get("description"))),
        created_at=epoch_to_iso(raw.get("time_created")),
        updated_at=epoch_to_iso(raw.get("time_saved")),
    )


_AFFILIATE_OFFER_STATUS = {"active": "Active", "paused": "Paused"}


def normalize_affiliate_offer(raw: Any) -> AffiliateOffer:
    raw = _as_dict(raw)
    payout = default_payout_entry(raw)
    ruleset = _as_dict(deep_get(raw, "relationship", "ruleset"))
    reporting = _as_dict(deep_get(raw, "relationship", "reporting"))
    remaining = _as_dict(deep_get(raw, "relationship", "remaining_caps"))

    return AffiliateOffer(
        id=to_str(raw.get("network_offer_id"), "unknown"),
        name=to_str(raw.get("name"), "Unnamed Offer"),
        category=to_str(deep_get(raw, "relationship", "category", "name"), "General"),
        description=strip_html(raw.get("html_description")) or "No description available",
        status=_AFFILIATE_OFFER_STATUS.get(str(raw.get("offer_status", "")).lower(), "Inactive"),
        tracking_url=to_str(raw.get("tracking_url")),
        thumbnail_url=to_str(raw.get("thumbnail_url")),
        default_payout=parse_currency(payout.get("payout_amount")),
        payout_type=to_str(payout.get("payout_type"), "cpa"),
        countries=to_str_list(ruleset.get("countries")),
        platforms=to_str_list(ruleset.get("platforms")),
        device_types=to_str_list(ruleset.get("device_types")),
        languages=to_str_list(ruleset.get("languages")),
        created_at=epoch_to_iso(raw.get("time_created")),
        updated_at=epoch_to_iso(raw.get("time_saved")),
        caps=OfferCaps(
            daily_conversions=to_int(raw.get("daily_conversion_cap")),
            weekly_conversions=to_int(raw.get("weekly_conversion_cap")),
            monthly_conversions=to_int(raw.get("monthly_conversion_cap")),
            global_conversions=to_int(raw.get("global_conversion_cap")),
            daily_payout=parse_currency(raw.get("daily_payout_cap")),
            remaining_daily_payout=parse_currency(remaining.get("remaining_daily_payout_cap")),
            remaining_daily_conversions=to_int(remaining.get("remaining_daily_conversion_cap")),
        ),
        performance=OfferPerformance(
            impressions=to_int(reporting.get("imp")),
            clicks=to_int(reporting.get("total_click")),
            conversions=to_int(reporting.get("cv")),
            revenue=parse_currency(reporting.get("revenue")),
            cvr=parse_currency(reporting.get("cvr")),
        ),
        creatives_count=to_int(deep_get(raw, "relationship", "creatives", "total")),
        visibility=to_str(raw.get("visibility"), "public"),
        affiliate_status=to_str(deep_get(raw, "relationship", "offer_affiliate_status"), "unknown"),
    )


# ── Partners ────────────────────────────────────────────


def normalize_affiliate(raw: Any) -> Affiliate:
    raw = _as_dict(raw)
    return Affiliate(
        id=to_str(raw.get("network_affiliate_id"), "unknown"),
        name=to_str(raw.get("name"), "Unknown"),
        account_status=to_str(raw.get("account_status")),
        account_manager_id=to_str(raw.get("account_manager_id")),
        account_manager_name=to_str(raw.get("account_manager_name")),
        today_revenue=to_str(raw.get("today_revenue")),
        today_revenue_amount=parse_currency(raw.get("today_revenue")),
        balance=parse_currency(raw.get("balance")),
        labels=to_str_list(raw.get("labels")),
        is_payable=to_bool(raw.get("is_payable")),
        payment_type=to_str(raw.get("payment_type")),
        last_login_date=epoch_to_iso(first_present(raw.get("last_login"), raw.get("time_last_login"))),
        created_date=epoch_to_iso(raw.get("time_created")),
        updated_date=epoch_to_iso(raw.get("time_saved")),
    )


def _manager_name(raw: dict, key: str) -> str:
    manager = _as_dict(deep_get(raw, "relationship", key))
    full = " ".join(p for p in (manager.get("first_name"), manager.get("last_name")) if p)
    return full


def normalize_advertiser(raw: Any) -> Advertiser:
    raw = _as_dict(raw)
    return Advertiser(
        id=to_str(raw.get("network_advertiser_id"), "unknown"),
        name=to_str(raw.get("name"), "Unknown"),
        account_status=to_str(first_present(raw.get("account_status"), raw.get("advertiser_status"))),
        account_manager_id=to_str(first_present(raw.get("account_manager_id"), raw.get("network_employee_id"))),
        account_manager_name=to_str(first_present(
            raw.get("account_manager_name"), _manager_name(raw, "account_manager"),
        )),
        sales_manager_name=to_str(first_present(
            raw.get("sales_manager_name"), _manager_name(raw, "sales_manager"),
        )),
        default_currency_id=to_str(raw.get("default_currency_id"), "USD"),
        today_revenue=to_str(raw.get("today_revenue")),
        today_revenue_amount=parse_currency(raw.get("today_revenue")),
        labels=to_str_list(raw.get("labels")),
        created_date=epoch_to_iso(raw.get("time_created")),
        updated_date=epoch_to_iso(raw.get("time_saved")),
    )


# ── Deals & coupons ─────────────────────────────────────


def _normalize_deal_product(raw: Any) -> DealProduct:
    raw = _as_dict(raw)
    return DealProduct(
        id=to_str(raw.get("network_advertiser_deal_product_id"), "unknown"),
        name=to_str(raw.get("product_name"), "Unknown"),
        product_url=to_str(raw.get("product_url")),
        before_discount_price=parse_currency(raw.get("before_discount_price")),
        after_discount_price=parse_currency(raw.get("after_discount_price")),
        retail_price=parse_currency(raw.get("retail_price")),
        discount_percentage=parse_currency(raw.get("discount_percentage")),
        currency_id=to_str(raw.get("price_currency_id"), "USD"),
    )


def _normalize_deal_offer(raw: Any) -> DealOffer:
    raw = _as_dict(raw)
    return DealOffer(
        id=to_str(raw.get("network_offer_id"), "unknown"),
        name=to_str(raw.get("name"), "Unknown"),
        status=to_str(raw.get("offer_status")),
        tracking_url=to_str(raw.get("tracking_url")),
    )


def normalize_deal(raw: Any) -> Deal:
    raw = _as_dict(raw)
    products = deep_get(raw, "relationship", "deal_products", default=[])
    offers = deep_get(raw, "relationship", "offers", default=[])
    return Deal(
        id=to_str(raw.get("network_advertiser_deal_id"), "unknown"),
        name=to_str(raw.get("name"), "Unknown"),
        brand_name=to_str(raw.get("brand_name")),
        deal_type=to_str(raw.get("deal_type")),
        status=to_str(raw.get("deal_status")),
        categories=to_str_list(raw.get("deal_categories")),
        description=strip_html(raw.get("description")),
        restrictions=to_str(raw.get("restrictions")),
        scope=to_str(raw.get("scope")),
        coupon_code=to_str(raw.get("coupon_code")),
        discount_percentage=parse_currency(raw.get("coupon_code_discount_percentage")),
        discount_amount=parse_currency(raw.get("coupon_code_discount_amount")),
        discount_currency_id=to_str(raw.get("coupon_code_discount_currency_id")),
        threshold_quantity=to_int(raw.get("threshold_quantity")),
        threshold_amount=parse_currency(raw.get("threshold_amount")),
        purchase_limit_quantity=to_int(raw.get("purchase_limit_quantity")),
        purchase_limit_amount=parse_currency(raw.get("purchase_limit_amount")),
        valid_from=epoch_to_iso(raw.get("date_valid_from")),
        valid_to=epoch_to_iso(raw.get("date_valid_to")),
        products=[_normalize_deal_product(p) for p in products] if isinstance(products, list) else [],
        offers=[_normalize_deal_offer(o) for o in offers] if isinstance(offers, list) else [],
        created_at=epoch_to_iso(raw.get("time_created")),
        updated_at=epoch_to_iso(raw.get("time_saved")),
    )


def normalize_coupon_code(raw: Any) -> CouponCode:
    raw = _as_dict(raw)
    offer = deep_get(raw, "relationship", "offer")
    if isinstance(offer, dict):
        offer_ref = _ref(offer, "network_offer_id")
    else:
        offer_ref = EntityRef(id=to_str(raw.get("network_offer_id"), "unknown"))
    description = raw.get("description")
    return CouponCode(
        id=to_str(raw.get("network_coupon_code_id"), "unknown"),
        name=to_str(raw.get("coupon_code"), "Unknown"),
        status=to_str(raw.get("coupon_status")),
        tracking_link=to_str(raw.get("tracking_link")),
        start_date=to_str(raw.get("start_date")),
        end_date=to_str(raw.get("end_date")),
        description=to_str(description) if to_bool(raw.get("is_description_plain_text")) else strip_html(description),
        offer=offer_ref,
        created_at=epoch_to_iso(raw.get("time_created")),
        updated_at=epoch_to_iso(raw.get("time_saved")),
    )


# ── Traffic ─────────────────────────────────────────────


def normalize_traffic_control(raw: Any) -> TrafficControl:
    raw = _as_dict(raw)
    return TrafficControl(
        id=to_str(raw.get("network_traffic_control_id"), "unknown"),
        name=to_str(first_present(deep_get(raw, "relationship", "name"), raw.get("name")), "Unknown"),
        description=to_str(first_present(deep_get(raw, "relationship", "description"), raw.get("description"))),
        status=to_str(raw.get("status")),
        control_type=to_str(raw.get("control_type")),
        is_apply_all_offers=to_bool(raw.get("is_apply_all_offers")),
        comparison_method=to_str(raw.get("comparison_method")),
        variables=to_str_list(raw.get("variables")),
        date_valid_from=to_str(raw.get("date_valid_from")),
        date_valid_to=to_str(raw.get("date_valid_to")),
    )


def normalize_blocked_source(raw: Any) -> BlockedSource:
    raw = _as_dict(raw)
    sub_id = to_str(raw.get("sub_id"), "Unknown")
    offer_id = to_str(raw.get("network_offer_id"), "unknown")
    return BlockedSource(
        id=f"{offer_id}:{sub_id}",
        name=sub_id,
        offer=EntityRef(id=offer_id, name=to_str(raw.get("offer_name"), "Unknown")),
        status=to_str(raw.get("traffic_blocking_status")),
        created_at=epoch_to_iso(raw.get("time_created")),
        updated_at=epoch_to_iso(raw.get("time_saved")),
    )


def normalize_blocked_variable(raw: Any) -> BlockedVariable:
    raw = _as_dict(raw)
    variable = to_str(raw.get("variable"), "Unknown")
    value = to_str(raw.get("value"))
    return BlockedVariable(
        id=f"{variable}:{value}",
        name=variable,
        value=value,
        operator=to_str(raw.get("operator")),
    )


# ── Conversions ─────────────────────────────────────────


def normalize_conversion(raw: Any) -> ConversionRecord:
    raw = _as_dict(raw)
    rel = _as_dict(raw.get("relationship"))
    revenue = parse_currency(raw.get("revenue"))
    payout = parse_currency(raw.get("payout"))
    offer = _ref(rel.get("offer"), "network_offer_id", "Unknown Offer")
    return ConversionRecord(
        id=to_str(raw.get("conversion_id"), "unknown"),
        name=offer.name,
        status=to_str(raw.get("conversion_status") or raw.get("status")),
        revenue=revenue,
        payout=payout,
        profit=revenue - payout,
        conversion_time=epoch_to_iso(raw.get("conversion_unix_timestamp")),
        offer=offer,
        affiliate=_ref(rel.get("affiliate"), "network_affiliate_id", "Unknown Affiliate"),
        advertiser=_ref(rel.get("advertiser"), "network_advertiser_id"),
        country=to_str(raw.get("country")),
        sub1=to_str(raw.get("sub1")),
        transaction_id=to_str(raw.get("transaction_id")),
    )


NORMALIZERS = {
    "offers": normalize_offer,
    "affiliate_offers": normalize_affiliate_offer,
    "affiliates": normalize_affiliate,
    "advertisers": normalize_advertiser,
    "deals": normalize_deal,
    "coupon_codes": normalize_coupon_code,
    "traffic_controls": normalize_traffic_control,
    "blocked_sources": normalize_blocked_source,
    "blocked_variables": normalize_blocked_variable,
    "conversions": normalize_conversion,
}
