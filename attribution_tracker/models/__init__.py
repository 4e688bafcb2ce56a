"""Database models package."""
from attribution_tracker.models.base import Base, Database, get_database
from attribution_tracker.models.conversion import Conversion, ConversionProduct, JourneyStep

__all__ = ["Base", "Database", "get_database", "Conversion", "ConversionProduct", "JourneyStep"]
