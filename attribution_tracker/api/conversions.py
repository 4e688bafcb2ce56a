"""
Conversion tracking API endpoints.

Records purchases sent by the storefront tracking script and serves
campaign reports and order details.

Every response uses the envelope {"success": bool, ...}; failures carry the
underlying error message in "error".
"""
from flask import Blueprint, current_app, jsonify, request

from attribution_tracker.models.base import get_database
from attribution_tracker.services.campaign_performance import CampaignFilter, query_campaign_performance
from attribution_tracker.services.conversion_writer import conversion_writer
from attribution_tracker.services.order_reader import OrderNotFoundError, get_order

conversions_bp = Blueprint('conversions', __name__, url_prefix='/api')


def _failure(e: Exception, status_code: int = 500):
    return jsonify({
        'success': False,
        'error': str(e)
    }), status_code


@conversions_bp.route('/track-conversion', methods=['POST'])
def track_conversion():
    """
    Record a conversion with its products and customer journey.

    Request body:
        {
            "orderId": "5551234",             // Order identifier (not unique)
            "orderNumber": "#1001",
            "value": 129.90,
            "subtotal": 110.00,
            "tax": 19.90,
            "currency": "EUR",
            "gclid": "...", "firstClickGclid": "...",
            "utmSource": "google", "utmMedium": "cpc", "utmCampaign": "spring",
            "utmTerm": "...", "utmContent": "...",
            "firstUtmSource": "...", ...
            "attrSource": "...", "attrCampaign": "...", "attrAdgroup": "...", "attrAd": "...",
            "firstAttrSource": "...", "firstAttrCampaign": "...",
            "market": "de", "domain": "shop.de",
            "shippingCountry": "DE", "billingCountry": "DE",
            "email": "jane@example.com",
            "journeyLength": 4,
            "timeToConversion": 86400,
            "firstClickTimestamp": 1717000000000,  // Optional: epoch ms or ISO 8601
            "lastClickTimestamp": 1717080000000,
            "products": [
                {"name": "Shirt", "sku": "S1", "variant": "M", "quantity": 1, "price": 50}
            ],
            "journey": [
                {"url": "https://shop.de/", "path": "/", "title": "Home",
                 "pageType": "home", "referrer": "https://google.com/", "timestamp": 1717000000000}
            ]
        }

    Returns:
        JSON response with the generated conversion id

    Example:
        POST /api/track-conversion

        Response:
        {
            "success": true,
            "conversionId": 42,
            "orderId": "5551234"
        }
    """
    data = request.get_json(silent=True) or {}
    current_app.logger.info("Received conversion: %s", data.get('orderId') if isinstance(data, dict) else None)

    try:
        with get_database().session() as db:
            conversion = conversion_writer.record_conversion(db, data)
            conversion_id = conversion.id
            order_id = conversion.order_id

        current_app.logger.info("Conversion saved: %s (id=%s)", order_id, conversion_id)

        return jsonify({
            'success': True,
            'conversionId': conversion_id,
            'orderId': order_id
        }), 200

    except Exception as e:
        current_app.logger.error("Error saving conversion: %s", e, exc_info=True)
        return _failure(e)


@conversions_bp.route('/conversions/by-campaign', methods=['GET'])
def conversions_by_campaign():
    """
    Get conversion totals grouped by campaign and market.

    Query parameters:
        market: Market code, or "all" (optional)
        startDate: ISO 8601 date, inclusive (optional, default 2024-01-01)
        endDate: ISO 8601 date, inclusive (optional, default now)

    Example:
        GET /api/conversions/by-campaign?market=de&startDate=2024-06-01

        Response:
        {
            "success": true,
            "data": [
                {
                    "utm_campaign": "spring",
                    "attr_campaign": "Spring Sale",
                    "market": "de",
                    "conversions": 12,
                    "revenue": 1530.5,
                    "avg_journey_length": 3.5,
                    "avg_time_to_conversion": 7200.0
                }
            ]
        }
    """
    try:
        filters = CampaignFilter.from_args(request.args)

        with get_database().session() as db:
            rows = query_campaign_performance(db, filters)

        return jsonify({
            'success': True,
            'data': rows
        }), 200

    except Exception as e:
        current_app.logger.error("Error fetching conversions: %s", e, exc_info=True)
        return _failure(e)


@conversions_bp.route('/order/<order_id>', methods=['GET'])
def order_detail(order_id: str):
    """
    Get a single order with its products and journey.

    Example:
        GET /api/order/5551234

        Response:
        {
            "success": true,
            "order": {
                "id": 42,
                "order_id": "5551234",
                ...,
                "products": [{"product_name": "Shirt", ...}],
                "journey": [{"sequence_number": 1, "url": "https://shop.de/", ...}]
            }
        }
    """
    try:
        with get_database().session() as db:
            order = get_order(db, order_id)

        return jsonify({
            'success': True,
            'order': order
        }), 200

    except OrderNotFoundError:
        return jsonify({
            'success': False,
            'error': 'Order not found'
        }), 404
    except Exception as e:
        current_app.logger.error("Error fetching order: %s", e, exc_info=True)
        return _failure(e)
