"""Look a user up by username and test a password against the stored hash."""

import sys

from maintenance import run
from security import verify_password

DEFAULT_USERNAME = "sjohnson"
DEFAULT_PASSWORD = "Test123!"


def check_user(db, username=DEFAULT_USERNAME, password=DEFAULT_PASSWORD):
    print(f"\nLooking up user {username}...")
    user = db["user"].find_one({"username": username})
    if not user:
        print("User not found")
        return None

    print("User found:")
    for field in ("username", "email", "firstName", "lastName", "role", "employeeId", "lastLogin"):
        print(f"  {field}: {user.get(field)}")

    print("\nTesting password comparison...")
    matched = verify_password(password, user.get("password"))
    print(f"Password match: {matched}")
    return matched


def main():
    run(check_user, *sys.argv[1:3])


if __name__ == "__main__":
    main()
