"""
Bulk insert the resort staff roster.

The roster goes out as one unordered bulk write: the server applies every
insert it can, in no particular order, and reports the rest. Nothing is rolled
back, so a rerun only reports the already-present IDs as failures.
"""

import logging
from datetime import datetime
from typing import List

from pydantic import ValidationError
from pymongo.errors import BulkWriteError

from database import utcnow
from maintenance import print_employees, run
from schemas import Employee

logger = logging.getLogger(__name__)

ROSTER = [
    {
        "employeeID": "EMP003", "firstName": "Sarah", "lastName": "Johnson",
        "position": "Ski Instructor", "monthlyRate": 6000, "startDate": datetime(2023, 1, 15),
        "contactNumber": "555-0101", "duties": ["Ski Instruction", "Safety Training"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP004", "firstName": "Michael", "lastName": "Chen",
        "position": "Operations Manager", "monthlyRate": 8500, "startDate": datetime(2022, 11, 1),
        "contactNumber": "555-0102", "duties": ["Staff Management", "Operations Planning", "Resource Allocation"],
        "isActive": True, "role": "admin",
    },
    {
        "employeeID": "EMP005", "firstName": "Emma", "lastName": "Davis",
        "position": "Equipment Manager", "monthlyRate": 5500, "startDate": datetime(2023, 2, 1),
        "contactNumber": "555-0103", "duties": ["Equipment Maintenance", "Inventory Management"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP006", "firstName": "James", "lastName": "Wilson",
        "position": "Senior Ski Instructor", "monthlyRate": 7000, "startDate": datetime(2022, 9, 15),
        "contactNumber": "555-0104", "duties": ["Advanced Ski Instruction", "Instructor Training", "Safety Coordination"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP007", "firstName": "Sofia", "lastName": "Martinez",
        "position": "Guest Services Manager", "monthlyRate": 6500, "startDate": datetime(2023, 3, 1),
        "contactNumber": "555-0105", "duties": ["Customer Service", "Complaint Resolution", "Guest Experience"],
        "isActive": True, "role": "admin",
    },
    {
        "employeeID": "EMP008", "firstName": "Alex", "lastName": "Thompson",
        "position": "Snowboard Instructor", "monthlyRate": 5800, "startDate": datetime(2023, 1, 20),
        "contactNumber": "555-0106", "duties": ["Snowboard Instruction", "Youth Programs"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP009", "firstName": "Lisa", "lastName": "Anderson",
        "position": "Safety Coordinator", "monthlyRate": 6200, "startDate": datetime(2022, 12, 1),
        "contactNumber": "555-0107", "duties": ["Safety Protocols", "Emergency Response", "Staff Training"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP010", "firstName": "David", "lastName": "Brown",
        "position": "Maintenance Supervisor", "monthlyRate": 6800, "startDate": datetime(2022, 10, 15),
        "contactNumber": "555-0108", "duties": ["Facility Maintenance", "Equipment Repairs", "Safety Checks"],
        "isActive": True, "role": "staff",
    },
    {
        "employeeID": "EMP011", "firstName": "Maria", "lastName": "Garcia",
        "position": "HR Manager", "monthlyRate": 7500, "startDate": datetime(2022, 8, 1),
        "contactNumber": "555-0109", "duties": ["Recruitment", "Employee Relations", "Training Programs"],
        "isActive": True, "role": "admin",
    },
    {
        "employeeID": "EMP012", "firstName": "Robert", "lastName": "Taylor",
        "position": "IT Specialist", "monthlyRate": 7000, "startDate": datetime(2023, 4, 1),
        "contactNumber": "555-0110", "duties": ["System Maintenance", "Technical Support", "Software Updates"],
        "isActive": True, "role": "staff",
    },
]


def insert_roster(db, roster: List[dict]) -> List[dict]:
    """Insert `roster`; return one result per entry, in roster order."""
    results = [None] * len(roster)
    docs, positions = [], []
    now = utcnow()

    for index, entry in enumerate(roster):
        try:
            employee = Employee(**entry)
        except ValidationError as e:
            errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            results[index] = {"success": False, "employeeID": entry.get("employeeID"), "error": errors}
            continue
        docs.append({**employee.model_dump(), "created_at": now, "updated_at": now})
        positions.append(index)

    failed = {}
    if docs:
        try:
            db["employee"].insert_many(docs, ordered=False)
        except BulkWriteError as e:
            for err in e.details.get("writeErrors", []):
                failed[err["index"]] = err.get("errmsg", "write failed")

    for batch_index, index in enumerate(positions):
        entry = roster[index]
        if batch_index in failed:
            results[index] = {"success": False, "employeeID": entry["employeeID"], "error": failed[batch_index]}
        else:
            results[index] = {
                "success": True,
                "employeeID": entry["employeeID"],
                "name": f"{entry['firstName']} {entry['lastName']}",
                "position": entry["position"],
            }
    return results


def summary_line(results: List[dict]) -> str:
    created = sum(1 for r in results if r["success"])
    return f"Created {created} out of {len(results)} employees"


def create_employees(db, roster=None):
    roster = ROSTER if roster is None else roster
    results = insert_roster(db, roster)

    print("\nResults:")
    for result in results:
        if result["success"]:
            print(f"✅ Created: {result['employeeID']} - {result['name']} ({result['position']})")
        else:
            print(f"❌ Failed to create {result['employeeID']}: {result['error']}")

    print(f"\nSummary: {summary_line(results)}")
    print_employees(db, "All employees in database:", detail="position")
    return results


def main():
    run(create_employees)


if __name__ == "__main__":
    main()
