"""List every employee in the database."""

from maintenance import print_employees, run


def check_employees(db):
    employees = list(db["employee"].find({}))
    print(f"Found {len(employees)} employees")
    print_employees(db, "All employees:")
    return employees


def main():
    run(check_employees)


if __name__ == "__main__":
    main()
