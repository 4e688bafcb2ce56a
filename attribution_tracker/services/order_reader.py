"""Order detail lookup."""
from typing import Dict

from sqlalchemy.orm import Session

from attribution_tracker.models.conversion import Conversion, ConversionProduct, JourneyStep


class OrderNotFoundError(LookupError):
    """Raised when no conversion exists for an order id."""

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


def get_order(db: Session, order_id: str) -> Dict:
    """
    Get a conversion with its products and journey by order id.

    Order ids are not unique; when several conversions share one, whichever
    row the database returns first is used.

    Args:
        db: Database session
        order_id: Business order identifier

    Returns:
        Conversion dictionary with nested 'products' and 'journey' lists,
        journey ordered by sequence_number

    Raises:
        OrderNotFoundError: If no conversion matches
    """
    conversion = db.query(Conversion).filter(Conversion.order_id == order_id).first()
    if not conversion:
        raise OrderNotFoundError(order_id)

    products = db.query(ConversionProduct).filter(
        ConversionProduct.conversion_id == conversion.id
    ).all()

    journey = db.query(JourneyStep).filter(
        JourneyStep.conversion_id == conversion.id
    ).order_by(
        JourneyStep.sequence_number
    ).all()

    order = conversion.to_dict()
    order['products'] = [product.to_dict() for product in products]
    order['journey'] = [step.to_dict() for step in journey]
    return order
