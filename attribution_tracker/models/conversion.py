"""
Database models for conversions, their product lines and customer journeys.

A Conversion is the root record; products and journey steps are owned by it
and only ever created together with it.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from attribution_tracker.models.base import Base


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Conversion(Base):
    """
    One completed purchase with its marketing attribution.

    Stores both the touch that triggered the purchase (utm_*, attr_*, gclid)
    and the first-ever touch (first_*). order_id is intentionally not unique:
    re-submitting an order creates another row.
    """

    __tablename__ = "conversions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Order
    order_id = Column(Text, nullable=False, index=True)
    order_number = Column(Text, nullable=True)
    value = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    subtotal = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    tax = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    currency = Column(Text, nullable=True)

    # Click identifiers
    gclid = Column(Text, nullable=True)
    first_gclid = Column(Text, nullable=True)

    # UTM parameters (current touch)
    utm_source = Column(Text, nullable=True)
    utm_medium = Column(Text, nullable=True)
    utm_campaign = Column(Text, nullable=True, index=True)
    utm_term = Column(Text, nullable=True)
    utm_content = Column(Text, nullable=True)

    # UTM parameters (first touch)
    first_utm_source = Column(Text, nullable=True)
    first_utm_medium = Column(Text, nullable=True)
    first_utm_campaign = Column(Text, nullable=True)
    first_utm_term = Column(Text, nullable=True)
    first_utm_content = Column(Text, nullable=True)

    # Attribution (current touch)
    attr_source = Column(Text, nullable=True)
    attr_campaign = Column(Text, nullable=True)
    attr_adgroup = Column(Text, nullable=True)
    attr_ad = Column(Text, nullable=True)

    # Attribution (first touch)
    first_attr_source = Column(Text, nullable=True)
    first_attr_campaign = Column(Text, nullable=True)
    first_attr_adgroup = Column(Text, nullable=True)
    first_attr_ad = Column(Text, nullable=True)

    # Storefront / customer
    market = Column(Text, nullable=True, index=True)
    domain = Column(Text, nullable=True)
    shipping_country = Column(Text, nullable=True)
    billing_country = Column(Text, nullable=True)
    customer_email = Column(Text, nullable=True)

    # Journey summary
    journey_length = Column(Integer, nullable=True)
    time_to_conversion = Column(Integer, nullable=True)  # as reported by the storefront script

    first_click_at = Column(DateTime(timezone=True), nullable=True)
    last_click_at = Column(DateTime(timezone=True), nullable=True)
    converted_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    products = relationship(
        "ConversionProduct",
        back_populates="conversion",
        cascade="all, delete-orphan",
        order_by="ConversionProduct.id",
    )
    journey = relationship(
        "JourneyStep",
        back_populates="conversion",
        cascade="all, delete-orphan",
        order_by="JourneyStep.sequence_number",
    )

    def __repr__(self) -> str:
        return f"<Conversion {self.order_id} (id={self.id})>"

    def to_dict(self) -> dict:
        """
        Convert conversion to dictionary.

        Returns:
            Dictionary of every column, datetimes as ISO 8601 strings
        """
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.name] = value
        return data


class ConversionProduct(Base):
    """One purchased line item of a conversion."""

    __tablename__ = "conversion_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversion_id = Column(
        Integer, ForeignKey("conversions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    product_name = Column(Text, nullable=True)
    product_sku = Column(Text, nullable=True)
    variant_title = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=True)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=True)

    conversion = relationship("Conversion", back_populates="products")

    def __repr__(self) -> str:
        return f"<ConversionProduct {self.product_sku} x{self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "conversion_id": self.conversion_id,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "variant_title": self.variant_title,
            "quantity": self.quantity,
            "price": self.price,
        }


class JourneyStep(Base):
    """
    One page visit on the path to a purchase.

    sequence_number is the 1-based position in the list the storefront sent,
    not an ordering derived from visited_at.
    """

    __tablename__ = "customer_journey"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversion_id = Column(
        Integer, ForeignKey("conversions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    url = Column(Text, nullable=True)
    path = Column(Text, nullable=True)
    title = Column(Text, nullable=True)
    page_type = Column(Text, nullable=True)  # e.g. 'home', 'product', 'collection', 'cart'
    referrer = Column(Text, nullable=True)
    visited_at = Column(DateTime(timezone=True), nullable=True)
    sequence_number = Column(Integer, nullable=False)

    conversion = relationship("Conversion", back_populates="journey")

    def __repr__(self) -> str:
        return f"<JourneyStep #{self.sequence_number} {self.url}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "conversion_id": self.conversion_id,
            "url": self.url,
            "path": self.path,
            "title": self.title,
            "page_type": self.page_type,
            "referrer": self.referrer,
            "visited_at": _isoformat(self.visited_at),
            "sequence_number": self.sequence_number,
        }
