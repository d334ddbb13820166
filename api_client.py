"""
Client-side access to the REST API.

`ApiClient` is the one place that knows the base URL, attaches the bearer
token and turns every failure into an `ApiError`. The flow classes below hold
the per-screen logic of the web front end (login, password reset, HR role
management, shopping reviews, order estimates) so it can be driven from
scripts and tests.

Role checks made here are a convenience for the user interface only. The
server decides what a token may do.
"""

import json
import logging
import os
import threading
from typing import Callable, List, Optional

import requests

from config import Config

logger = logging.getLogger(__name__)

ADMIN_DASHBOARD_PATH = "/admin/dashboard"
DEFAULT_DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"
HOME_PATH = "/"
MIN_PASSWORD_LENGTH = 8
RESET_REDIRECT_DELAY = 3.0  # seconds


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ClientState:
    """`authToken` and `userInfo`, persisted as JSON in a local file. No expiry check."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or Config.CLIENT_STATE_PATH
        self._data = {}
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    self._data = json.load(f)
            except (OSError, ValueError):
                logger.warning(f"Ignoring unreadable client state at {self.path}")
                self._data = {}

    def _save(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)

    @property
    def auth_token(self) -> Optional[str]:
        return self._data.get("authToken")

    @property
    def user_info(self) -> dict:
        return dict(self._data.get("userInfo") or {})

    def store(self, token: str, user_info: dict):
        self._data = {"authToken": token, "userInfo": user_info}
        self._save()

    def clear(self):
        self._data = {}
        self._save()


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, state: Optional[ClientState] = None, session=None, timeout: float = 10):
        self.base_url = (Config.API_BASE_URL if base_url is None else base_url).rstrip("/")
        self.state = state or ClientState()
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, auth: bool) -> dict:
        headers = {"Accept": "application/json"}
        if auth and self.state.auth_token:
            headers["Authorization"] = f"Bearer {self.state.auth_token}"
        return headers

    def request(self, method: str, path: str, json_body=None, params=None, auth: bool = True):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(auth),
                json=json_body,
                params=params,
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise ApiError("The server took too long to respond")
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError("Unable to reach the server")

        if response.status_code >= 400:
            raise ApiError(self._error_message(response), response.status_code)
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"Request failed with status {response.status_code}"
        detail = body.get("detail") or body.get("message") if isinstance(body, dict) else None
        if isinstance(detail, list):
            # pydantic validation errors
            detail = "; ".join(d.get("msg", "") for d in detail if isinstance(d, dict))
        return detail or f"Request failed with status {response.status_code}"

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, json_body=None, **kwargs):
        return self.request("POST", path, json_body=json_body, **kwargs)

    def patch(self, path, json_body=None, **kwargs):
        return self.request("PATCH", path, json_body=json_body, **kwargs)

    def delete(self, path, **kwargs):
        return self.request("DELETE", path, **kwargs)


class FlowResult:
    def __init__(self, ok: bool, message: str = "", redirect: Optional[str] = None, data=None, redirect_delay: float = 0):
        self.ok = ok
        self.message = message
        self.redirect = redirect
        self.redirect_delay = redirect_delay
        self.data = data

    def __repr__(self):
        return f"FlowResult(ok={self.ok!r}, message={self.message!r}, redirect={self.redirect!r})"


# ---------- Auth flows ----------

class LoginFlow:
    """idle -> submitting -> idle (failure) | done (token and profile stored)."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.state = "idle"

    def submit(self, login: str, password: str) -> FlowResult:
        self.state = "submitting"
        try:
            data = self.api.post("/api/auth/login", {"login": login, "password": password}, auth=False)
        except ApiError as e:
            self.state = "idle"
            return FlowResult(False, e.message or "Login failed")

        user = data.get("user", {})
        user_info = {
            "username": user.get("username"),
            "id": user.get("id"),
            "role": user.get("role"),
            "email": user.get("email"),
            "firstName": user.get("firstName"),
            "lastName": user.get("lastName"),
            "employeeID": user.get("employeeID"),
        }
        self.api.state.store(data["token"], user_info)
        self.state = "done"
        target = ADMIN_DASHBOARD_PATH if user_info["role"] == "admin" else DEFAULT_DASHBOARD_PATH
        logger.info(f"Welcome {user_info['firstName']} {user_info['lastName']} ({user_info['role']})")
        return FlowResult(True, "Login successful", redirect=target, data=user_info)


class ForgotPasswordFlow:
    def __init__(self, api: ApiClient):
        self.api = api
        self.state = "idle"

    def submit(self, email: str) -> FlowResult:
        self.state = "submitting"
        try:
            data = self.api.post("/api/auth/forgot-password", {"email": email}, auth=False)
        except ApiError as e:
            self.state = "idle"
            return FlowResult(False, e.message or "Failed to process request")
        self.state = "done"
        # only present when the server runs with EXPOSE_RESET_TOKEN
        return FlowResult(True, data.get("message", ""), data={"resetToken": data.get("resetToken")})


def validate_new_password(password: str, confirm: str) -> Optional[str]:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if password != confirm:
        return "Passwords do not match"
    return None


class ResetPasswordFlow:
    def __init__(self, api: ApiClient, token: Optional[str]):
        self.api = api
        self.token = token
        self.state = "idle"

    @property
    def can_submit(self) -> bool:
        return bool(self.token)

    def submit(self, password: str, confirm: str) -> FlowResult:
        if not self.can_submit:
            return FlowResult(False, "Invalid or missing reset token")
        self.state = "validating"
        problem = validate_new_password(password, confirm)
        if problem:
            self.state = "idle"
            return FlowResult(False, problem)
        self.state = "submitting"
        try:
            data = self.api.post("/api/auth/reset-password", {"token": self.token, "password": password}, auth=False)
        except ApiError as e:
            self.state = "idle"
            return FlowResult(False, e.message or "Failed to reset password")
        self.state = "done"
        return FlowResult(
            True,
            data.get("message", "Password has been reset"),
            redirect=LOGIN_PATH,
            redirect_delay=RESET_REDIRECT_DELAY,
        )


# ---------- HR role management ----------

class HRManager:
    UNAUTHENTICATED = "unauthenticated"
    NON_ADMIN = "authenticated-non-admin"
    ADMIN = "authenticated-admin"

    def __init__(self, api: ApiClient):
        self.api = api
        self.users: List[dict] = []
        self.error = ""

    def access_state(self) -> str:
        if not self.api.state.auth_token:
            return self.UNAUTHENTICATED
        role = (self.api.state.user_info.get("role") or "").lower()
        return self.ADMIN if role == "admin" else self.NON_ADMIN

    def gate(self) -> Optional[str]:
        """Redirect target for anyone who is not an admin, None to stay."""
        state = self.access_state()
        if state == self.UNAUTHENTICATED:
            return LOGIN_PATH
        if state == self.NON_ADMIN:
            return HOME_PATH
        return None

    def load(self) -> List[dict]:
        try:
            self.users = self.api.get("/api/users/all")
            self.error = ""
        except ApiError:
            self.error = "Failed to fetch users"
        return self.users

    def change_role(self, user_id: str, new_role: str) -> bool:
        try:
            self.api.patch(f"/api/users/{user_id}/role", {"role": new_role})
        except ApiError:
            self.error = "Failed to update user role"
            return False
        self.users = [dict(u, role=new_role) if u.get("id") == user_id else u for u in self.users]
        return True


# ---------- Shopping reviews ----------

class ShoppingReviews:
    def __init__(self, api: ApiClient):
        self.api = api
        self.reviews: List[dict] = []
        self.error = ""

    def load(self) -> List[dict]:
        try:
            self.reviews = self.api.get("/api/shopping/reviews")
            self.error = ""
        except ApiError:
            self.error = "Failed to fetch shopping reviews"
        return self.reviews

    @staticmethod
    def can_decide(review: dict) -> bool:
        return review.get("status") == "Pending"

    def _decide(self, review_id: str, action: str) -> bool:
        review = next((r for r in self.reviews if r.get("id") == review_id), None)
        if review is None or not self.can_decide(review):
            self.error = "Only pending reviews can be approved or rejected"
            return False
        try:
            self.api.post(f"/api/shopping/reviews/{review_id}/{action}", {})
        except ApiError:
            self.error = f"Failed to {action} review"
            return False
        self.load()
        return True

    def approve(self, review_id: str) -> bool:
        return self._decide(review_id, "approve")

    def reject(self, review_id: str) -> bool:
        return self._decide(review_id, "reject")


# ---------- Orders ----------

def format_money(value) -> str:
    return f"{float(value or 0):,.2f}"


def order_lines(order: dict) -> List[dict]:
    """Display rows for an order's server-computed currentEstimates."""
    rows = []
    for line in order.get("currentEstimates", []):
        rows.append({
            "name": line.get("name") or line.get("currentStatus", ""),
            "quantity": line.get("quantity"),
            "totalCost": format_money(line.get("totalCost")),
            "status": line.get("currentStatus", ""),
            "ingredients": ", ".join(
                f"{i['name']}: {i['required']:g}" for i in line.get("ingredients", [])
            ),
        })
    return rows


def order_total(order: dict) -> str:
    if "currentTotalCost" in order:
        return format_money(order["currentTotalCost"])
    return format_money(sum(float(l.get("totalCost") or 0) for l in order.get("currentEstimates", [])))


class OrderManager:
    def __init__(self, api: ApiClient):
        self.api = api
        self.orders: List[dict] = []
        self.recipes: List[dict] = []
        self.pagination: dict = {}
        self.error = ""

    def load(self, page: int = 1) -> List[dict]:
        """Fetch one page of orders plus the recipe list.

        Listed orders carry only the stored `estimates`; `order_lines` and
        `order_total` need the `currentEstimates` that `details(order_id)`
        returns, one request per order.
        """
        try:
            data = self.api.get("/api/orders", params={"page": page})
            self.orders = data["orders"]
            self.pagination = data["pagination"]
            self.recipes = self.api.get("/api/recipes")
            self.error = ""
        except ApiError:
            self.error = "Failed to fetch orders"
        return self.orders

    def details(self, order_id: str) -> Optional[dict]:
        try:
            return self.api.get(f"/api/orders/{order_id}")
        except ApiError:
            self.error = "Failed to fetch order details"
            return None

    def create(self, customer_name: str, order_date: str, delivery_date: str, items: List[dict]) -> Optional[str]:
        try:
            data = self.api.post("/api/orders", {
                "customerName": customer_name,
                "orderDate": order_date,
                "deliveryDate": delivery_date,
                "items": items,
            })
        except ApiError as e:
            self.error = e.message or "Failed to create order"
            return None
        self.load()
        return data["id"]

    def delete(self, order_id: str) -> bool:
        try:
            self.api.delete(f"/api/orders/{order_id}")
        except ApiError as e:
            self.error = e.message or "Failed to delete order"
            return False
        self.load()
        return True


def schedule_redirect(result: FlowResult, navigate: Callable[[str], None]) -> Optional[threading.Timer]:
    """Run `navigate(result.redirect)` now, or after the result's delay."""
    if not result.redirect:
        return None
    if not result.redirect_delay:
        navigate(result.redirect)
        return None
    timer = threading.Timer(result.redirect_delay, navigate, args=(result.redirect,))
    timer.daemon = True
    timer.start()
    return timer
