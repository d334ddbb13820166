import pytest
import requests

from api_client import (
    ADMIN_DASHBOARD_PATH,
    DEFAULT_DASHBOARD_PATH,
    HOME_PATH,
    LOGIN_PATH,
    ApiClient,
    ApiError,
    ClientState,
    FlowResult,
    ForgotPasswordFlow,
    HRManager,
    LoginFlow,
    OrderManager,
    ResetPasswordFlow,
    ShoppingReviews,
    order_lines,
    order_total,
    schedule_redirect,
    validate_new_password,
)
from tests.conftest import PASSWORD


class ExplodingSession:
    """Fails the test if the client touches the network."""

    def request(self, *args, **kwargs):
        raise AssertionError("no request expected")


class DownSession:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def state(tmp_path):
    return ClientState(str(tmp_path / "state.json"))


@pytest.fixture
def api(client, state):
    return ApiClient(base_url="", state=state, session=client)


def signed_in(api, login):
    """Copy a server-issued token into the client state."""

    def _sign_in(username, role):
        headers = login(username)
        api.state.store(headers["Authorization"].split(" ", 1)[1], {"username": username, "role": role})

    return _sign_in


class TestApiClient:
    def test_server_detail_becomes_message(self, api, mongo):
        with pytest.raises(ApiError) as exc:
            api.post("/api/auth/login", {"login": "ghost", "password": "Nope12345"}, auth=False)
        assert exc.value.status_code == 401
        assert exc.value.message == "Invalid login credentials"

    def test_validation_errors_are_joined(self, api, make_user, login):
        make_user("staffer")
        signed_in(api, login)("staffer", "staff")
        with pytest.raises(ApiError) as exc:
            api.post("/api/orders", {"customerName": "x"})
        assert exc.value.status_code == 422
        assert "Field required" in exc.value.message

    def test_unreachable_server(self, state):
        api = ApiClient(base_url="http://nowhere.invalid", state=state, session=DownSession())
        with pytest.raises(ApiError) as exc:
            api.get("/api/orders")
        assert exc.value.message == "Unable to reach the server"
        assert exc.value.status_code is None

    def test_state_survives_reload(self, tmp_path):
        path = str(tmp_path / "state.json")
        ClientState(path).store("abc", {"role": "staff"})
        reloaded = ClientState(path)
        assert reloaded.auth_token == "abc"
        assert reloaded.user_info == {"role": "staff"}
        reloaded.clear()
        assert ClientState(path).auth_token is None

    def test_corrupt_state_file_is_ignored(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        assert ClientState(str(path)).auth_token is None


class TestLoginFlow:
    def test_admin_goes_to_admin_dashboard(self, api, make_user):
        make_user("admin", role="admin")
        result = LoginFlow(api).submit("admin", PASSWORD)
        assert result.ok
        assert result.redirect == ADMIN_DASHBOARD_PATH
        assert api.state.auth_token
        assert api.state.user_info["role"] == "admin"
        assert api.state.user_info["employeeID"].startswith("EMP")

    def test_staff_goes_to_dashboard(self, api, make_user):
        make_user("edavis")
        result = LoginFlow(api).submit("edavis@alpineresort.com", PASSWORD)
        assert result.redirect == DEFAULT_DASHBOARD_PATH
        assert result.data["username"] == "edavis"

    def test_failure_keeps_state_empty(self, api, make_user):
        make_user("edavis")
        flow = LoginFlow(api)
        result = flow.submit("edavis", "Wrong12345")
        assert not result.ok
        assert result.message == "Invalid login credentials"
        assert flow.state == "idle"
        assert api.state.auth_token is None


class TestPasswordReset:
    def test_local_validation(self):
        assert validate_new_password("short", "short") == "Password must be at least 8 characters long"
        assert validate_new_password("Longenough1", "Longenough2") == "Passwords do not match"
        assert validate_new_password("Longenough1", "Longenough1") is None

    def test_invalid_input_never_reaches_server(self, state):
        api = ApiClient(base_url="", state=state, session=ExplodingSession())
        flow = ResetPasswordFlow(api, "token")
        assert flow.submit("short", "short").ok is False
        assert flow.submit("Longenough1", "Different1").message == "Passwords do not match"
        assert flow.state == "idle"

    def test_missing_token_disables_submit(self, state):
        api = ApiClient(base_url="", state=state, session=ExplodingSession())
        flow = ResetPasswordFlow(api, None)
        assert flow.can_submit is False
        assert flow.submit("Longenough1", "Longenough1").ok is False

    def test_forgot_then_reset(self, api, mongo, make_user, monkeypatch):
        monkeypatch.setattr("config.Config.EXPOSE_RESET_TOKEN", True)
        make_user("edavis")
        forgot = ForgotPasswordFlow(api).submit("edavis@alpineresort.com")
        assert forgot.ok
        token = forgot.data["resetToken"]
        assert token

        result = ResetPasswordFlow(api, token).submit("Brandnew99", "Brandnew99")
        assert result.ok
        assert result.redirect == LOGIN_PATH
        assert result.redirect_delay == 3.0
        assert LoginFlow(api).submit("edavis", "Brandnew99").ok

    def test_forgot_unknown_email(self, api, mongo):
        result = ForgotPasswordFlow(api).submit("nobody@alpineresort.com")
        assert not result.ok
        assert result.message == "No account found with this email address"

    def test_reset_token_hidden_by_default(self, api, make_user):
        make_user("edavis")
        assert ForgotPasswordFlow(api).submit("edavis@alpineresort.com").data["resetToken"] is None

    def test_server_rejects_weak_password(self, api, make_user, monkeypatch):
        monkeypatch.setattr("config.Config.EXPOSE_RESET_TOKEN", True)
        make_user("edavis")
        token = ForgotPasswordFlow(api).submit("edavis@alpineresort.com").data["resetToken"]
        # long enough for the client, no digit or capital for the server
        result = ResetPasswordFlow(api, token).submit("alllowercase", "alllowercase")
        assert not result.ok
        assert "uppercase" in result.message


class TestHRManager:
    def test_gate(self, api):
        hr = HRManager(api)
        assert hr.access_state() == HRManager.UNAUTHENTICATED
        assert hr.gate() == LOGIN_PATH
        api.state.store("t", {"role": "staff"})
        assert hr.gate() == HOME_PATH
        api.state.store("t", {"role": "Admin"})
        assert hr.gate() is None

    def test_load_and_change_role(self, api, make_user, login):
        target = make_user("edavis")
        make_user("admin", role="admin")
        signed_in(api, login)("admin", "admin")

        hr = HRManager(api)
        assert {u["username"] for u in hr.load()} == {"admin", "edavis"}
        assert hr.change_role(str(target["_id"]), "manager")
        assert next(u for u in hr.users if u["username"] == "edavis")["role"] == "manager"

    def test_failed_change_leaves_list_alone(self, api, make_user, login):
        make_user("admin", role="admin")
        signed_in(api, login)("admin", "admin")
        hr = HRManager(api)
        hr.load()
        before = [dict(u) for u in hr.users]
        assert hr.change_role("64b000000000000000000000", "manager") is False
        assert hr.error == "Failed to update user role"
        assert hr.users == before

    def test_non_admin_load_fails(self, api, make_user, login):
        make_user("staffer")
        signed_in(api, login)("staffer", "staff")
        hr = HRManager(api)
        assert hr.load() == []
        assert hr.error == "Failed to fetch users"


class TestShoppingReviews:
    def test_approve_refetches(self, api, mongo, make_user, login):
        review_id = str(mongo["shoppingreview"].insert_one(
            {"date": None, "submittedBy": "edavis", "itemsCount": 2, "status": "Pending"}
        ).inserted_id)
        make_user("boss", role="manager")
        signed_in(api, login)("boss", "manager")

        reviews = ShoppingReviews(api)
        reviews.load()
        assert reviews.can_decide(reviews.reviews[0])
        assert reviews.approve(review_id)
        assert reviews.reviews[0]["status"] == "Approved"

        # decided reviews are not offered again
        assert not reviews.can_decide(reviews.reviews[0])
        assert reviews.reject(review_id) is False
        assert mongo["shoppingreview"].find_one({})["status"] == "Approved"


class TestOrderDisplay:
    def test_lines_and_total(self):
        order = {
            "currentEstimates": [
                {
                    "name": "Pizza",
                    "quantity": 4,
                    "totalCost": 1234.5,
                    "currentStatus": "ready",
                    "ingredients": [{"name": "Flour", "required": 2.0}, {"name": "Cheese", "required": 0.8}],
                },
                {"quantity": 1, "currentStatus": "Recipe not found", "totalCost": 0, "ingredients": []},
            ]
        }
        lines = order_lines(order)
        assert lines[0] == {
            "name": "Pizza",
            "quantity": 4,
            "totalCost": "1,234.50",
            "status": "ready",
            "ingredients": "Flour: 2, Cheese: 0.8",
        }
        assert lines[1]["name"] == "Recipe not found"
        assert order_total(order) == "1,234.50"
        assert order_total(dict(order, currentTotalCost=99)) == "99.00"

    def test_order_manager(self, api, mongo, make_user, login):
        flour = mongo["ingredient"].insert_one(
            {"name": "Flour", "unit": "kg", "costPerUnit": 2.0, "currentQuantity": 10, "reorderPoint": 2}
        ).inserted_id
        bread = mongo["recipe"].insert_one({
            "name": "Bread",
            "instructions": "Bake",
            "ingredients": [{"ingredientId": str(flour), "quantity": 1, "unit": "kg"}],
        }).inserted_id
        make_user("staffer")
        signed_in(api, login)("staffer", "staff")

        orders = OrderManager(api)
        order_id = orders.create(
            "Alpine Lodge", "2024-02-01T10:00:00", "2024-02-02T10:00:00",
            [{"recipeId": str(bread), "quantity": 3}],
        )
        assert order_id
        assert [o["id"] for o in orders.orders] == [order_id]
        assert orders.pagination["total"] == 1
        assert [r["name"] for r in orders.recipes] == ["Bread"]
        # listed orders have no current estimates until their details are fetched
        assert order_lines(orders.orders[0]) == []

        detail = orders.details(order_id)
        assert order_total(detail) == "6.00"
        assert order_lines(detail)[0]["ingredients"] == "Flour: 3"

        assert orders.delete(order_id)
        assert orders.orders == []

    def test_order_manager_reports_server_error(self, api, make_user, login):
        make_user("staffer")
        signed_in(api, login)("staffer", "staff")
        orders = OrderManager(api)
        created = orders.create(
            "Alpine Lodge", "2024-02-01T10:00:00", "2024-01-01T10:00:00",
            [{"recipeId": "64b000000000000000000000", "quantity": 1}],
        )
        assert created is None
        assert orders.error == "Delivery date must be after order date"


class TestScheduleRedirect:
    def test_immediate(self):
        seen = []
        assert schedule_redirect(FlowResult(True, redirect="/x"), seen.append) is None
        assert seen == ["/x"]

    def test_delayed(self):
        seen = []
        timer = schedule_redirect(FlowResult(True, redirect="/login", redirect_delay=0.01), seen.append)
        timer.join(2)
        assert seen == ["/login"]

    def test_nothing_to_do(self):
        assert schedule_redirect(FlowResult(False), lambda path: None) is None
