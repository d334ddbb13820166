"""Recompute one month's revenue/expenditure summary. Defaults to the current month."""

import sys

from database import utcnow
from maintenance import run
from reports import parse_month, update_monthly_summary


def refresh_month(db, month=None):
    if month is None:
        now = utcnow()
        year, month_num = now.year, now.month
    else:
        year, month_num = parse_month(month)
    summary = update_monthly_summary(db, year, month_num)
    print(
        f"{summary['month']}: revenue {summary['totalRevenue']:.2f}, "
        f"expenditure {summary['totalExpenditure']:.2f}, "
        f"profit/loss {summary['profitOrLoss']:.2f}"
    )
    return summary


def main():
    run(refresh_month, *sys.argv[1:2])


if __name__ == "__main__":
    main()
