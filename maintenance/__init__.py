"""
One-shot administrative scripts.

Each module opens a single connection with `open_database`, which also makes
sure the unique indexes exist, runs one batch of reads/writes against the
shared schemas, prints a summary and closes the connection whether or not the
batch succeeded.
"""

import logging
from contextlib import contextmanager

from config import configure_logging
from database import connect, ensure_indexes

logger = logging.getLogger(__name__)


@contextmanager
def open_database(url=None, name=None):
    client, db = connect(url, name)
    print("Connected to MongoDB")
    try:
        ensure_indexes(db)
        yield db
    finally:
        client.close()
        print("\nDisconnected from MongoDB")


def run(task, *args):
    """Entry point wrapper: connect, run `task(db, *args)`, log any failure, always disconnect."""
    configure_logging()
    try:
        with open_database() as db:
            return task(db, *args)
    except Exception:
        logger.exception(f"{task.__name__} failed")
        return None


def describe(employee: dict, detail: str = "role") -> str:
    return f"- {employee.get('employeeID')}: {employee.get('firstName')} {employee.get('lastName')} ({employee.get(detail)})"


def print_employees(db, title: str, detail: str = "role"):
    print(f"\n{title}")
    for emp in db["employee"].find({}).sort("employeeID", 1):
        print(describe(emp, detail))
