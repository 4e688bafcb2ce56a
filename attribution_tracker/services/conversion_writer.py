"""
Service for recording conversions.

Maps the storefront tracking payload (camelCase keys) onto a Conversion row,
its product lines and its journey steps, and persists them as one unit.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from attribution_tracker.models.conversion import Conversion, ConversionProduct, JourneyStep

logger = logging.getLogger(__name__)


# Conversion column -> payload key
CONVERSION_FIELDS = (
    ('order_id', 'orderId'),
    ('order_number', 'orderNumber'),
    ('value', 'value'),
    ('subtotal', 'subtotal'),
    ('tax', 'tax'),
    ('currency', 'currency'),
    ('gclid', 'gclid'),
    ('first_gclid', 'firstClickGclid'),
    ('utm_source', 'utmSource'),
    ('utm_medium', 'utmMedium'),
    ('utm_campaign', 'utmCampaign'),
    ('utm_term', 'utmTerm'),
    ('utm_content', 'utmContent'),
    ('first_utm_source', 'firstUtmSource'),
    ('first_utm_medium', 'firstUtmMedium'),
    ('first_utm_campaign', 'firstUtmCampaign'),
    ('first_utm_term', 'firstUtmTerm'),
    ('first_utm_content', 'firstUtmContent'),
    ('attr_source', 'attrSource'),
    ('attr_campaign', 'attrCampaign'),
    ('attr_adgroup', 'attrAdgroup'),
    ('attr_ad', 'attrAd'),
    ('first_attr_source', 'firstAttrSource'),
    ('first_attr_campaign', 'firstAttrCampaign'),
    ('first_attr_adgroup', 'firstAttrAdgroup'),
    ('first_attr_ad', 'firstAttrAd'),
    ('market', 'market'),
    ('domain', 'domain'),
    ('shipping_country', 'shippingCountry'),
    ('billing_country', 'billingCountry'),
    ('customer_email', 'email'),
    ('journey_length', 'journeyLength'),
    ('time_to_conversion', 'timeToConversion'),
)

# Optional client-side timestamps
TIMESTAMP_FIELDS = (
    ('first_click_at', 'firstClickTimestamp'),
    ('last_click_at', 'lastClickTimestamp'),
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a client-supplied timestamp into an aware UTC datetime.

    Zero is a real instant (the epoch); only a missing value gives None.

    Args:
        value: Epoch milliseconds (int/float), ISO 8601 string, or datetime

    Returns:
        Datetime in UTC, or None when value is None

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce an optional timestamp, treating empty values (None, '', 0) as not supplied.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if not value:
        return None
    return parse_timestamp(value)


class ConversionWriter:
    """Service for persisting conversions with their products and journey."""

    @staticmethod
    def build_conversion(payload: Dict[str, Any], converted_at: Optional[datetime] = None) -> Conversion:
        """
        Build an unsaved Conversion from a tracking payload.

        Args:
            payload: Tracking payload as sent by the storefront
            converted_at: Processing time (defaults to now)

        Returns:
            Conversion instance, not yet added to a session
        """
        fields = {column: payload.get(key) for column, key in CONVERSION_FIELDS}
        for column, key in TIMESTAMP_FIELDS:
            fields[column] = coerce_timestamp(payload.get(key))

        # Always the moment of processing, never client-supplied
        fields['converted_at'] = converted_at or datetime.now(timezone.utc)

        return Conversion(**fields)

    @staticmethod
    def build_products(conversion_id: int, products: Optional[List[Dict[str, Any]]]) -> List[ConversionProduct]:
        """Build product rows in input order."""
        return [
            ConversionProduct(
                conversion_id=conversion_id,
                product_name=product.get('name'),
                product_sku=product.get('sku'),
                variant_title=product.get('variant'),
                quantity=product.get('quantity'),
                price=product.get('price'),
            )
            for product in products or []
        ]

    @staticmethod
    def build_journey(conversion_id: int, journey: Optional[List[Dict[str, Any]]]) -> List[JourneyStep]:
        """
        Build journey rows numbered by their position in the input list.

        Steps are never reordered by timestamp.
        """
        return [
            JourneyStep(
                conversion_id=conversion_id,
                url=step.get('url'),
                path=step.get('path'),
                title=step.get('title'),
                page_type=step.get('pageType'),
                referrer=step.get('referrer'),
                visited_at=parse_timestamp(step.get('timestamp')),
                sequence_number=position,
            )
            for position, step in enumerate(journey or [], start=1)
        ]

    @staticmethod
    def record_conversion(db: Session, payload: Dict[str, Any]) -> Conversion:
        """
        Persist a conversion, then its products, then its journey steps.

        Args:
            db: Database session
            payload: Tracking payload

        Returns:
            The committed Conversion (id populated)

        Raises:
            SQLAlchemyError: On any database failure. Nothing is rolled back here;
                the caller's session (Database.session()) owns the rollback
            ValueError: If a timestamp cannot be parsed
        """
        conversion = ConversionWriter.build_conversion(payload)
        db.add(conversion)
        # Flush to obtain the generated id before inserting children
        db.flush()

        products = ConversionWriter.build_products(conversion.id, payload.get('products'))
        if products:
            db.add_all(products)
            db.flush()

        journey = ConversionWriter.build_journey(conversion.id, payload.get('journey'))
        if journey:
            db.add_all(journey)
            db.flush()

        db.commit()
        logger.debug(
            "Stored conversion %s with %d products and %d journey steps",
            conversion.id, len(products), len(journey)
        )
        return conversion


# Singleton instance
conversion_writer = ConversionWriter()
