"""Normalized dashboard entities — flat, immutable, never-null identity fields."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Entity(BaseModel):
    """Base for everything the normalizer emits. Built per request, never mutated."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class EntityRef(Entity):
    """Reference to a related offer/affiliate/advertiser."""
    id: str = "unknown"
    name: str = "Unknown"


# ── Offers ──────────────────────────────────────────────


class Offer(Entity):
    id: str
    name: str = "Unnamed Offer"
    status: str = ""
    currency_id: str = "USD"
    default_payout: float = 0.0
    default_revenue: float = 0.0
    preview_url: str = ""
    offer_url: str = ""
    advertiser: EntityRef = EntityRef()
    category: str = "General"
    countries: list[str] = []
    visibility: str = ""
    description: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OfferCaps(Entity):
    daily_conversions: int = 0
    weekly_conversions: int = 0
    monthly_conversions: int = 0
    global_conversions: int = 0
    daily_payout: float = 0.0
    remaining_daily_payout: float = 0.0
    remaining_daily_conversions: int = 0


class OfferPerformance(Entity):
    impressions: int = 0
    clicks: int = 0
    conversions: int = 0
    revenue: float = 0.0
    cvr: float = 0.0


class AffiliateOffer(Entity):
    """An offer as seen from the affiliate side of the network."""
    id: str
    name: str = "Unnamed Offer"
    category: str = "General"
    description: str = "No description available"
    status: str = "Inactive"  # Active | Paused | Inactive
    tracking_url: str = ""
    thumbnail_url: str = ""
    default_payout: float = 0.0
    payout_type: str = "cpa"
    countries: list[str] = []
    platforms: list[str] = []
    device_types: list[str] = []
    languages: list[str] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    caps: OfferCaps = OfferCaps()
    performance: OfferPerformance = OfferPerformance()
    creatives_count: int = 0
    visibility: str = "public"
    affiliate_status: str = "unknown"


# ── Partners ────────────────────────────────────────────


class Affiliate(Entity):
    id: str
    name: str = "Unknown"
    account_status: str = ""
    account_manager_id: str = ""
    account_manager_name: str = ""
    today_revenue: str = ""
    today_revenue_amount: float = 0.0
    balance: float = 0.0
    labels: list[str] = []
    is_payable: bool = False
    payment_type: str = ""
    last_login_date: Optional[str] = None
    created_date: Optional[str] = None
    updated_date: Optional[str] = None


class Advertiser(Entity):
    id: str
    name: str = "Unknown"
    account_status: str = ""
    account_manager_id: str = ""
    account_manager_name: str = ""
    sales_manager_name: str = ""
    default_currency_id: str = "USD"
    today_revenue: str = ""
    today_revenue_amount: float = 0.0
    labels: list[str] = []
    created_date: Optional[str] = None
    updated_date: Optional[str] = None


# ── Deals & coupons ─────────────────────────────────────


class DealProduct(Entity):
    id: str
    name: str = "Unknown"
    product_url: str = ""
    before_discount_price: float = 0.0
    after_discount_price: float = 0.0
    retail_price: float = 0.0
    discount_percentage: float = 0.0
    currency_id: str = "USD"


class DealOffer(Entity):
    id: str
    name: str = "Unknown"
    status: str = ""
    tracking_url: str = ""


class Deal(Entity):
    id: str
    name: str = "Unknown"
    brand_name: str = ""
    deal_type: str = ""
    status: str = ""
    categories: list[str] = []
    description: str = ""
    restrictions: str = ""
    scope: str = ""
    coupon_code: str = ""
    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    discount_currency_id: str = ""
    threshold_quantity: int = 0
    threshold_amount: float = 0.0
    purchase_limit_quantity: int = 0
    purchase_limit_amount: float = 0.0
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    products: list[DealProduct] = []
    offers: list[DealOffer] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CouponCode(Entity):
    id: str
    name: str = "Unknown"  # the code itself
    status: str = ""
    tracking_link: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    offer: EntityRef = EntityRef()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ── Traffic ─────────────────────────────────────────────


class TrafficControl(Entity):
    id: str
    name: str = "Unknown"
    description: str = ""
    status: str = ""
    control_type: str = ""
    is_apply_all_offers: bool = False
    comparison_method: str = ""
    variables: list[str] = []
    date_valid_from: str = ""
    date_valid_to: str = ""


class BlockedSource(Entity):
    id: str
    name: str = "Unknown"  # blocked sub ID
    offer: EntityRef = EntityRef()
    status: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class BlockedVariable(Entity):
    id: str
    name: str = "Unknown"  # variable name
    value: str = ""
    operator: str = ""


class TrafficBundle(Entity):
    traffic_controls: list[TrafficControl] = []
    blocked_sources: list[BlockedSource] = []
    blocked_variables: list[BlockedVariable] = []


# ── Conversions & aggregates ────────────────────────────


class ConversionRecord(Entity):
    id: str
    name: str = "Unknown"  # offer name, for list display
    status: str = ""
    revenue: float = 0.0
    payout: float = 0.0
    profit: float = 0.0
    conversion_time: Optional[str] = None
    offer: EntityRef = EntityRef()
    affiliate: EntityRef = EntityRef()
    advertiser: EntityRef = EntityRef()
    country: str = ""
    sub1: str = ""
    transaction_id: str = ""


class ProfitRecord(Entity):
    id: str
    name: str
    profit: float = 0.0
    revenue: float = 0.0
    payout: float = 0.0
    conversions: int = 0


class ReportingRow(Entity):
    total_clicks: int = 0
    unique_clicks: int = 0
    conversions: int = 0
    payout: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0
    gross_sales: float = 0.0
    impressions: int = 0
    media_buying_cost: float = 0.0
    conversion_rate: str = Field("0.00", serialization_alias="conversionRate")
    ctr: str = "0.00"
    epc: str = "0.00"
    rpc: str = "0.00"
    offer: Optional[EntityRef] = None
    affiliate: Optional[EntityRef] = None
    advertiser: Optional[EntityRef] = None
    dimensions: dict[str, EntityRef] = {}


class ReportingMetrics(Entity):
    total_clicks: int = Field(0, serialization_alias="totalClicks")
    unique_clicks: int = Field(0, serialization_alias="uniqueClicks")
    conversions: int = 0
    conversion_rate: str = Field("0.00", serialization_alias="conversionRate")
    payout: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0
    gross_sales: float = Field(0.0, serialization_alias="grossSales")
    impressions: int = 0
    media_buying_cost: float = Field(0.0, serialization_alias="mediaBuyingCost")


class ReportingSummary(Entity):
    metrics: ReportingMetrics = ReportingMetrics()
    raw: dict = {}
