"""Services package."""
from attribution_tracker.services.conversion_writer import conversion_writer, ConversionWriter, coerce_timestamp, parse_timestamp
from attribution_tracker.services.campaign_performance import CampaignFilter, query_campaign_performance
from attribution_tracker.services.order_reader import OrderNotFoundError, get_order

__all__ = [
    "conversion_writer",
    "ConversionWriter",
    "coerce_timestamp",
    "parse_timestamp",
    "CampaignFilter",
    "query_campaign_performance",
    "OrderNotFoundError",
    "get_order",
]
