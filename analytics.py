"""
Read-only analytics over purchase records.

Records are either customer documents (the default) or order documents; both
carry a ``date``, a ``total`` and an embedded ``products`` array of
{name, quantity, price} lines, so the same pipelines serve both.
"""
import logging
import os
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Tuple

from pydantic import TypeAdapter, ValidationError
from pymongo.database import Database

from errors import InvalidArgument

logger = logging.getLogger(__name__)

RECORD_COLLECTIONS = ("customers", "orders")
ANALYTICS_COLLECTION = os.getenv("ANALYTICS_COLLECTION", "customers")

DAY_FORMAT = "%Y-%m-%d"

_timestamp = TypeAdapter(datetime)


def parse_date(value: str, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or timestamp into a naive UTC datetime.

    A bare date stands for the whole day: its first millisecond, or its last
    one when ``end_of_day`` is set.
    """
    try:
        day = date.fromisoformat(value)
    except (TypeError, ValueError):
        pass
    else:
        start = datetime.combine(day, time.min)
        if end_of_day:
            return start + timedelta(days=1) - timedelta(milliseconds=1)
        return start
    try:
        parsed = _timestamp.validate_python(value)
    except ValidationError:
        raise InvalidArgument(f"Invalid date: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_range(start: str, end: str) -> Tuple[datetime, datetime]:
    start_dt = parse_date(start)
    end_dt = parse_date(end, end_of_day=True)
    if start_dt > end_dt:
        raise InvalidArgument("start must not be after end")
    return start_dt, end_dt


def top_products_pipeline(limit: int = 5) -> List[dict]:
    return [
        {"$unwind": "$products"},
        {"$group": {"_id": "$products.name", "totalSold": {"$sum": "$products.quantity"}}},
        {"$sort": {"totalSold": -1}},
        {"$limit": limit},
    ]


def sales_pipeline(start: datetime, end: datetime) -> List[dict]:
    return [
        {"$match": {"date": {"$gte": start, "$lte": end}}},
        {"$group": {
            "_id": {"$dateToString": {"format": DAY_FORMAT, "date": "$date"}},
            "totalSales": {"$sum": "$total"},
        }},
        {"$sort": {"_id": 1}},
    ]


def product_sales_pipeline(product_name: str, start: datetime, end: datetime) -> List[dict]:
    return [
        {"$unwind": "$products"},
        {"$match": {"products.name": product_name, "date": {"$gte": start, "$lte": end}}},
        {"$group": {
            "_id": {"$dateToString": {"format": DAY_FORMAT, "date": "$date"}},
            "totalSales": {"$sum": {"$multiply": ["$products.quantity", "$products.price"]}},
        }},
        {"$sort": {"_id": 1}},
    ]


def top_products(db: Database, limit: int = 5, source: str = ANALYTICS_COLLECTION) -> List[dict]:
    if limit < 1:
        raise InvalidArgument("limit must be positive")
    return list(db[source].aggregate(top_products_pipeline(limit)))


def sales_by_date_range(db: Database, start: str, end: str, source: str = ANALYTICS_COLLECTION) -> List[dict]:
    start_dt, end_dt = parse_range(start, end)
    return list(db[source].aggregate(sales_pipeline(start_dt, end_dt)))


def product_sales_by_date_range(db: Database, product_name: str, start: str, end: str,
                                source: str = ANALYTICS_COLLECTION) -> List[dict]:
    if not product_name:
        raise InvalidArgument("productName is required")
    start_dt, end_dt = parse_range(start, end)
    return list(db[source].aggregate(product_sales_pipeline(product_name, start_dt, end_dt)))


def nearby_customers(db: Database, longitude: float, latitude: float, max_distance: float) -> List[dict]:
    """Customers within ``max_distance`` meters of the point, nearest first."""
    if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
        raise InvalidArgument("longitude/latitude out of range")
    if max_distance < 0:
        raise InvalidArgument("maxDistance must not be negative")
    query = {
        "location": {
            "$nearSphere": {
                "$geometry": {"type": "Point", "coordinates": [longitude, latitude]},
                "$maxDistance": max_distance,
            }
        }
    }
    return list(db["customers"].find(query))


def search_products(db: Database, query: str) -> List[dict]:
    if not query or not query.strip():
        raise InvalidArgument("query is required")
    score = {"score": {"$meta": "textScore"}}
    cursor = db["products"].find({"$text": {"$search": query}}, score)
    return list(cursor.sort([("score", {"$meta": "textScore"})]))
