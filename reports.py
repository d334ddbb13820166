import logging
from datetime import datetime
from typing import Tuple

from database import utcnow
from schemas import MonthlySummary

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def parse_month(value: str) -> Tuple[int, int]:
    """'2023-09' -> (2023, 9)"""
    try:
        year, month = value.split("-")
        year, month = int(year), int(month)
    except ValueError:
        raise ValueError(f"Month must be in YYYY-MM format, got {value!r}")
    month_bounds(year, month)
    return year, month


def _sum_amount(db, collection: str, start: datetime, end: datetime) -> float:
    pipeline = [
        {"$match": {"date": {"$gte": start, "$lt": end}}},
        {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
    ]
    result = list(db[collection].aggregate(pipeline))
    return float(result[0]["total"]) if result else 0.0


def update_monthly_summary(db, year: int, month: int) -> dict:
    """Recompute and upsert the summary for one month from revenue and expenditure."""
    start, end = month_bounds(year, month)
    revenue = _sum_amount(db, "revenue", start, end)
    expenditure = _sum_amount(db, "expenditure", start, end)
    summary = MonthlySummary(
        month=f"{year}-{month:02d}",
        totalRevenue=round(revenue, 2),
        totalExpenditure=round(expenditure, 2),
        profitOrLoss=round(revenue - expenditure, 2),
    )
    now = utcnow()
    db["monthlysummary"].update_one(
        {"month": summary.month},
        {"$set": {**summary.model_dump(), "updated_at": now}, "$setOnInsert": {"created_at": now}},
        upsert=True,
    )
    logger.info(f"Monthly summary {summary.month}: revenue {revenue}, expenditure {expenditure}")
    return summary.model_dump()


def dashboard_stats(db) -> dict:
    now = utcnow()
    employees_total = db["employee"].count_documents({})
    employees_active = db["employee"].count_documents({"isActive": True})

    orders_by_status = {}
    for row in db["order"].aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
        orders_by_status[row["_id"]] = row["count"]

    pending_cost = 0.0
    for row in db["order"].aggregate([
        {"$match": {"status": "PENDING"}},
        {"$group": {"_id": None, "total": {"$sum": "$totalCost"}}},
    ]):
        pending_cost = float(row["total"])

    month = f"{now.year}-{now.month:02d}"
    summary = db["monthlysummary"].find_one({"month": month}, {"_id": 0})

    return {
        "employees": {"total": employees_total, "active": employees_active},
        "orders": {
            "total": sum(orders_by_status.values()),
            "byStatus": orders_by_status,
            "pendingCost": round(pending_cost, 2),
        },
        "shopping": {
            "pendingReviews": db["shoppingreview"].count_documents({"status": "Pending"}),
            "pendingItems": db["shoppingitem"].count_documents({"status": "Pending"}),
        },
        "currentMonth": summary or {"month": month, "totalRevenue": 0, "totalExpenditure": 0, "profitOrLoss": 0},
    }
