"""Create one test employee and check it can be found by its employeeID."""

from datetime import datetime

from database import create_document
from maintenance import print_employees, run
from schemas import Employee

TEST_EMPLOYEE_ID = "EMP002"


def build_test_employee() -> Employee:
    return Employee(
        employeeID=TEST_EMPLOYEE_ID,
        firstName="Test",
        lastName="Employee",
        position="Staff",
        monthlyRate=5000,
        startDate=datetime.now(),
        contactNumber="1234567890",
        duties=["General"],
        isActive=True,
        hasUser=False,
        role="staff",
    )


def create_test_employee(db):
    new_id = create_document("employee", build_test_employee(), database=db)
    print(f"Created employee with ID: {new_id}")

    found = db["employee"].find_one({"employeeID": TEST_EMPLOYEE_ID})
    print(f"\nFound by employeeID: {'Yes' if found else 'No'}")

    print_employees(db, "All employees in database:")
    return new_id


def main():
    run(create_test_employee)


if __name__ == "__main__":
    main()
