"""
Campaign performance service.

Aggregates stored conversions by campaign and market over a date range.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from attribution_tracker.models.conversion import Conversion

# Start of the reporting range when no startDate is given
DEFAULT_START_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Market value meaning "every market"
ALL_MARKETS = 'all'


def parse_date(value: str) -> datetime:
    """
    Parse an ISO 8601 date or datetime into an aware UTC datetime.

    Raises:
        ValueError: If the string is not a valid ISO 8601 date
    """
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class CampaignFilter:
    """Optional filters for the campaign performance report."""

    market: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "CampaignFilter":
        """
        Build a filter from request query parameters.

        Args:
            args: Mapping with optional market, startDate and endDate keys

        Raises:
            ValueError: If startDate or endDate is malformed
        """
        start_date = args.get('startDate')
        end_date = args.get('endDate')
        return cls(
            market=args.get('market') or None,
            start_date=parse_date(start_date) if start_date else None,
            end_date=parse_date(end_date) if end_date else None,
        )

    @property
    def filters_market(self) -> bool:
        return bool(self.market) and self.market != ALL_MARKETS

    def clauses(self, now: Optional[datetime] = None) -> List:
        """
        Build the WHERE predicates.

        The date range is always present (inclusive on both ends); the
        market predicate only when a specific market was requested.
        """
        start = self.start_date or DEFAULT_START_DATE
        end = self.end_date or now or datetime.now(timezone.utc)

        clauses = [
            Conversion.converted_at >= start,
            Conversion.converted_at <= end,
        ]
        if self.filters_market:
            clauses.append(Conversion.market == self.market)
        return clauses


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def query_campaign_performance(db: Session, filters: Optional[CampaignFilter] = None) -> List[Dict]:
    """
    Get conversion totals grouped by campaign and market.

    Args:
        db: Database session
        filters: Optional market/date filters

    Returns:
        List of dictionaries with utm_campaign, attr_campaign, market,
        conversions, revenue, avg_journey_length and avg_time_to_conversion,
        highest revenue first
    """
    filters = filters or CampaignFilter()
    revenue = func.sum(Conversion.value).label('revenue')

    results = db.query(
        Conversion.utm_campaign,
        Conversion.attr_campaign,
        Conversion.market,
        func.count(Conversion.id).label('conversions'),
        revenue,
        func.avg(Conversion.journey_length).label('avg_journey_length'),
        func.avg(Conversion.time_to_conversion).label('avg_time_to_conversion')
    ).filter(
        *filters.clauses()
    ).group_by(
        Conversion.utm_campaign,
        Conversion.attr_campaign,
        Conversion.market
    ).order_by(
        desc(revenue)
    ).all()

    return [
        {
            'utm_campaign': row.utm_campaign,
            'attr_campaign': row.attr_campaign,
            'market': row.market,
            'conversions': row.conversions,
            'revenue': _as_float(row.revenue),
            'avg_journey_length': _as_float(row.avg_journey_length),
            'avg_time_to_conversion': _as_float(row.avg_time_to_conversion),
        }
        for row in results
    ]
