"""
Give every employee without an employeeID a new one.

New IDs continue after the highest existing EMPnnn so they never collide with
IDs already handed out. Employees that already have an ID are not selected,
so running the script twice changes nothing the second time.
"""

import re

from database import utcnow
from maintenance import print_employees, run

ID_PREFIX = "EMP"
_ID_RE = re.compile(rf"^{ID_PREFIX}(\d+)$")

MISSING_ID = {"$or": [{"employeeID": {"$exists": False}}, {"employeeID": None}, {"employeeID": ""}]}


def format_employee_id(number: int) -> str:
    return f"{ID_PREFIX}{number:03d}"


def highest_id_number(db) -> int:
    highest = 0
    for emp in db["employee"].find({"employeeID": {"$regex": f"^{ID_PREFIX}\\d+$"}}, {"employeeID": 1}):
        match = _ID_RE.match(emp["employeeID"])
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def migrate_employee_ids(db):
    employees = list(db["employee"].find(MISSING_ID).sort("_id", 1))
    print(f"Found {len(employees)} employees without employeeID")

    next_number = highest_id_number(db) + 1
    assigned = []
    for emp in employees:
        new_id = format_employee_id(next_number)
        next_number += 1
        db["employee"].update_one(
            {"_id": emp["_id"]},
            {"$set": {"employeeID": new_id, "updated_at": utcnow()}},
        )
        assigned.append((str(emp["_id"]), new_id))
        print(f"Updated employee {emp.get('firstName')} {emp.get('lastName')} with ID: {new_id}")

    print_employees(db, "All employees after migration:")
    return assigned


def main():
    run(migrate_employee_ids)


if __name__ == "__main__":
    main()
