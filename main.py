import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Literal, Optional

from bson import ObjectId
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from config import Config, configure_logging
from database import db, create_document, ensure_indexes, get_documents, utcnow
from estimates import EstimateError, aggregate_ingredients, current_estimates, estimate_order
from reports import dashboard_stats, parse_month, update_monthly_summary
from schemas import (
    Bill,
    Employee,
    Expenditure,
    Ingredient,
    Order,
    OrderItem,
    Recipe,
    Revenue,
    ShoppingBill,
    ShoppingItem,
    ShoppingReview,
    User,
    as_naive_utc,
)
from security import (
    PASSWORD_RULE,
    current_user,
    hash_password,
    is_strong_password,
    issue_token,
    new_reset_token,
    require_roles,
    revoke_token,
    sanitize,
    verify_password,
)

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes()
    yield


app = FastAPI(title="Ski Resort Management API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

admin_only = require_roles("admin")
managers = require_roles("admin", "manager")


# ---------- Utilities ----------

def oid(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id format")


def with_id(doc):
    if not doc:
        return doc
    doc["id"] = str(doc.pop("_id"))
    return doc


def public_user(doc, employee=None):
    """User document without password material."""
    user = {
        "id": str(doc["_id"]),
        "username": doc.get("username"),
        "email": doc.get("email"),
        "firstName": doc.get("firstName"),
        "lastName": doc.get("lastName"),
        "role": doc.get("role"),
        "lastLogin": doc.get("lastLogin"),
    }
    if employee is not None:
        user["employeeID"] = employee.get("employeeID")
        user["position"] = employee.get("position")
    return user


def require_db():
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")


def find_or_404(collection: str, id_str: str, label: str):
    doc = db[collection].find_one({"_id": oid(id_str)})
    if not doc:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


def apply_update(collection: str, id_str: str, updates: dict, label: str):
    updates = {k: as_naive_utc(v) for k, v in updates.items() if v is not None}
    updates["updated_at"] = utcnow()
    doc = db[collection].find_one_and_update(
        {"_id": oid(id_str)}, {"$set": updates}, return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return with_id(doc)


def delete_or_404(collection: str, id_str: str, label: str):
    result = db[collection].delete_one({"_id": oid(id_str)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return {"ok": True}


# ---------- Error handlers ----------

@app.exception_handler(DuplicateKeyError)
def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    key = (exc.details or {}).get("keyValue")
    value = ", ".join(f"{k}={v}" for k, v in key.items()) if key else "unique field"
    logger.info(f"Duplicate key on {request.url.path}: {value}")
    return JSONResponse(status_code=400, content={"detail": f"Duplicate field value: {value}. Please use another value."})


@app.exception_handler(EstimateError)
def estimate_error_handler(request: Request, exc: EstimateError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------- Models for requests ----------

class RegisterIn(BaseModel):
    username: str
    password: str
    email: EmailStr
    firstName: str
    lastName: str
    employeeId: str  # the employee's employeeID, e.g. EMP003


class LoginIn(BaseModel):
    login: str  # username or email
    password: str


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str
    password: str


class RoleUpdate(BaseModel):
    role: Literal["admin", "manager", "staff"]


class EmployeeUpdate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    position: Optional[str] = None
    monthlyRate: Optional[float] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    duties: Optional[List[str]] = None
    isActive: Optional[bool] = None
    role: Optional[Literal["admin", "staff"]] = None


class OrderCreate(BaseModel):
    customerName: str
    orderDate: datetime
    deliveryDate: datetime
    items: List[OrderItem]
    status: Optional[Literal["PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED"]] = None


class OrderUpdate(BaseModel):
    customerName: Optional[str] = None
    orderDate: Optional[datetime] = None
    deliveryDate: Optional[datetime] = None
    items: Optional[List[OrderItem]] = None
    status: Optional[Literal["PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED"]] = None


class BillUpdate(BaseModel):
    amount: Optional[float] = None
    date: Optional[datetime] = None
    description: Optional[str] = None
    status: Optional[str] = None


class ShoppingItemUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    status: Optional[str] = None


class ShoppingBillUpdate(BaseModel):
    billNumber: Optional[str] = None
    totalAmount: Optional[float] = None
    date: Optional[datetime] = None
    status: Optional[str] = None


class ReviewIn(BaseModel):
    date: Optional[datetime] = None
    itemsCount: int
    submittedBy: Optional[str] = None


# ---------- Health ----------

@app.get("/")
def read_root():
    return {"message": "Ski Resort Management Backend Running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["database_url"] = "✅ Set" if Config.DATABASE_URL else "❌ Not Set"
            response["database_name"] = db.name if hasattr(db, "name") else "✅ Connected"
            response["connection_status"] = "Connected"
            try:
                response["collections"] = db.list_collection_names()
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
        else:
            response["database"] = "⚠️ Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ---------- Auth ----------

@app.post("/api/auth/register", status_code=201)
def register(data: RegisterIn):
    require_db()
    username = sanitize(data.username)
    if not username or len(username) < 3:
        raise HTTPException(400, detail="Username must be at least 3 characters long")
    if not is_strong_password(data.password):
        raise HTTPException(400, detail=PASSWORD_RULE)
    first_name, last_name = sanitize(data.firstName), sanitize(data.lastName)
    if not first_name:
        raise HTTPException(400, detail="First name is required")
    if not last_name:
        raise HTTPException(400, detail="Last name is required")
    email = data.email.lower()

    existing = db["user"].find_one({"$or": [{"username": username}, {"email": email}]})
    if existing:
        if existing.get("username") == username:
            raise HTTPException(400, detail=f"Username '{username}' is already taken")
        raise HTTPException(400, detail=f"Email '{email}' is already registered")

    employee = db["employee"].find_one({"employeeID": data.employeeId.strip()})
    if not employee:
        raise HTTPException(400, detail=f"Invalid employee ID: {data.employeeId}")
    if employee.get("hasUser"):
        raise HTTPException(400, detail="This employee already has a user account")

    user = User(
        username=username,
        email=email,
        password=hash_password(data.password),
        firstName=first_name,
        lastName=last_name,
        role=employee.get("role", "staff"),
        employeeId=str(employee["_id"]),
    )
    user_id = create_document("user", user)
    db["employee"].update_one({"_id": employee["_id"]}, {"$set": {"hasUser": True, "updated_at": utcnow()}})
    logger.info(f"Registered user {username} for employee {employee['employeeID']}")

    token = issue_token(user_id)
    return {
        "success": True,
        "token": token,
        "user": public_user({"_id": user_id, **user.model_dump()}, employee),
    }


@app.post("/api/auth/login")
def login(data: LoginIn):
    require_db()
    if not data.login or not data.password:
        raise HTTPException(400, detail="Please provide login credentials")
    user = db["user"].find_one({"$or": [{"username": data.login}, {"email": data.login.lower()}]})
    if not user or not verify_password(data.password, user.get("password")):
        logger.info(f"Failed login for {data.login}")
        raise HTTPException(401, detail="Invalid login credentials")

    now = utcnow()
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"lastLogin": now}})
    user["lastLogin"] = now
    employee = db["employee"].find_one({"_id": oid(user["employeeId"])}) if user.get("employeeId") else None
    token = issue_token(str(user["_id"]))
    logger.info(f"User {user['username']} logged in")
    return {
        "success": True,
        "token": token,
        "user": public_user(user, employee or {}),
    }


@app.post("/api/auth/logout")
def logout(user: dict = Depends(current_user)):
    revoke_token(user["token"])
    return {"ok": True}


@app.post("/api/auth/forgot-password")
def forgot_password(data: ForgotPasswordIn):
    require_db()
    user = db["user"].find_one({"email": data.email.lower()})
    if not user:
        raise HTTPException(404, detail="No account found with this email address")

    token, expires = new_reset_token()
    db["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"resetPasswordToken": token, "resetPasswordExpires": expires}},
    )
    # TODO: deliver the reset link by email once an SMTP relay is configured
    logger.info(f"Password reset requested for {user['username']}")
    logger.debug(f"Reset token for {user['username']}: {token}")

    response = {"success": True, "message": "Password reset instructions sent to your email"}
    if Config.EXPOSE_RESET_TOKEN:
        response["resetToken"] = token
    return response


@app.post("/api/auth/reset-password")
def reset_password(data: ResetPasswordIn):
    require_db()
    if not data.token or not data.password:
        raise HTTPException(400, detail="Please provide reset token and new password")
    if not is_strong_password(data.password):
        raise HTTPException(400, detail=PASSWORD_RULE)
    user = db["user"].find_one({
        "resetPasswordToken": data.token,
        "resetPasswordExpires": {"$gt": utcnow()},
    })
    if not user:
        raise HTTPException(400, detail="Invalid or expired reset token")

    db["user"].update_one(
        {"_id": user["_id"]},
        {
            "$set": {"password": hash_password(data.password), "updated_at": utcnow()},
            "$unset": {"resetPasswordToken": "", "resetPasswordExpires": ""},
        },
    )
    logger.info(f"Password reset completed for {user['username']}")
    return {"success": True, "message": "Password has been reset successfully"}


@app.get("/api/auth/employees/available")
def available_employees(
    search: Optional[str] = None,
    role: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user: dict = Depends(current_user),
):
    q = {"hasUser": {"$ne": True}}
    if search:
        pattern = {"$regex": re.escape(sanitize(search)), "$options": "i"}
        q["$or"] = [{"firstName": pattern}, {"lastName": pattern}, {"employeeID": pattern}]
    if role:
        q["role"] = sanitize(role)
    cursor = db["employee"].find(q).sort([("firstName", 1), ("lastName", 1)]).skip((page - 1) * limit).limit(limit)
    total = db["employee"].count_documents(q)
    return {
        "employees": [with_id(e) for e in cursor],
        "pagination": {"page": page, "limit": limit, "total": total, "pages": -(-total // limit)},
    }


# ---------- Users (HR) ----------

@app.get("/api/users/all")
def list_users(user: dict = Depends(admin_only)):
    users = list(db["user"].find({}).sort("username", 1))
    employee_ids = [oid(u["employeeId"]) for u in users if u.get("employeeId")]
    employees = {str(e["_id"]): e for e in db["employee"].find({"_id": {"$in": employee_ids}})}
    return [public_user(u, employees.get(u.get("employeeId"), {})) for u in users]


@app.patch("/api/users/{user_id}/role")
def change_role(user_id: str, data: RoleUpdate, admin: dict = Depends(admin_only)):
    updated = db["user"].find_one_and_update(
        {"_id": oid(user_id)},
        {"$set": {"role": data.role, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(404, detail="User not found")
    logger.info(f"{admin['username']} changed role of {updated['username']} to {data.role}")
    return public_user(updated)


# ---------- Employees ----------

@app.get("/api/employees")
def list_employees(active: Optional[bool] = None, user: dict = Depends(current_user)):
    q = {}
    if active is not None:
        q["isActive"] = active
    return [with_id(e) for e in db["employee"].find(q).sort("employeeID", 1)]


@app.get("/api/employees/{employee_id}")
def get_employee(employee_id: str, user: dict = Depends(current_user)):
    return with_id(find_or_404("employee", employee_id, "Employee"))


@app.post("/api/employees", status_code=201)
def create_employee(employee: Employee, admin: dict = Depends(admin_only)):
    new_id = create_document("employee", employee)
    logger.info(f"Employee {employee.employeeID} created by {admin['username']}")
    return {"id": new_id}


@app.patch("/api/employees/{employee_id}")
def update_employee(employee_id: str, data: EmployeeUpdate, admin: dict = Depends(admin_only)):
    return apply_update("employee", employee_id, data.model_dump(), "Employee")


# ---------- Ingredients & Recipes ----------

@app.get("/api/ingredients")
def list_ingredients(user: dict = Depends(current_user)):
    return [with_id(i) for i in db["ingredient"].find({}).sort("name", 1)]


@app.post("/api/ingredients", status_code=201)
def create_ingredient(ingredient: Ingredient, user: dict = Depends(managers)):
    return {"id": create_document("ingredient", ingredient)}


@app.get("/api/recipes")
def list_recipes(user: dict = Depends(current_user)):
    return [with_id(r) for r in db["recipe"].find({}).sort("name", 1)]


@app.get("/api/recipes/{recipe_id}")
def get_recipe(recipe_id: str, user: dict = Depends(current_user)):
    return with_id(find_or_404("recipe", recipe_id, "Recipe"))


@app.post("/api/recipes", status_code=201)
def create_recipe(recipe: Recipe, user: dict = Depends(managers)):
    for ing in recipe.ingredients:
        find_or_404("ingredient", ing.ingredientId, f"Ingredient {ing.ingredientId}")
    return {"id": create_document("recipe", recipe)}


# ---------- Orders ----------

FROZEN_ORDER_STATUSES = ("COMPLETED", "CANCELLED")
DELETABLE_ORDER_STATUSES = ("PENDING", "CANCELLED")


def check_order_dates(order_date: datetime, delivery_date: datetime):
    if as_naive_utc(delivery_date) <= as_naive_utc(order_date):
        raise HTTPException(400, detail="Delivery date must be after order date")


@app.get("/api/orders")
def list_orders(
    status: Optional[str] = None,
    customer: Optional[str] = None,
    startDate: Optional[datetime] = None,
    endDate: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user: dict = Depends(current_user),
):
    q = {}
    if status:
        q["status"] = status.upper()
    if customer:
        q["customerName"] = {"$regex": re.escape(customer), "$options": "i"}
    if startDate or endDate:
        q["orderDate"] = {}
        if startDate:
            q["orderDate"]["$gte"] = as_naive_utc(startDate)
        if endDate:
            q["orderDate"]["$lte"] = as_naive_utc(endDate)
    cursor = db["order"].find(q).sort("orderDate", -1).skip((page - 1) * limit).limit(limit)
    total = db["order"].count_documents(q)
    return {
        "orders": [with_id(o) for o in cursor],
        "pagination": {"page": page, "limit": limit, "total": total, "pages": -(-total // limit)},
    }


@app.post("/api/orders", status_code=201)
def create_order(data: OrderCreate, user: dict = Depends(current_user)):
    check_order_dates(data.orderDate, data.deliveryDate)
    if not data.items:
        raise HTTPException(400, detail="Order must contain at least one item")
    items = [i.model_dump() for i in data.items]
    estimates, total_cost = estimate_order(db, items)
    order = Order(
        customerName=sanitize(data.customerName),
        orderDate=data.orderDate,
        deliveryDate=data.deliveryDate,
        items=items,
        estimates=estimates,
        totalCost=total_cost,
        status=data.status or "PENDING",
        created_by=str(user["_id"]),
    )
    new_id = create_document("order", order)
    logger.info(f"Order {new_id} for {order.customerName} created, total cost {total_cost}")
    return {"id": new_id, "totalCost": total_cost, "estimates": estimates}


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, user: dict = Depends(current_user)):
    order = with_id(find_or_404("order", order_id, "Order"))
    lines = current_estimates(db, order)
    order["currentEstimates"] = lines
    order["currentTotalCost"] = round(sum(line.get("totalCost", 0) for line in lines), 2)
    order["ingredientRequirements"] = aggregate_ingredients(lines)
    return order


@app.patch("/api/orders/{order_id}")
def update_order(order_id: str, data: OrderUpdate, user: dict = Depends(current_user)):
    order = find_or_404("order", order_id, "Order")
    current = order.get("status")
    if current in FROZEN_ORDER_STATUSES:
        changes = data.model_dump(exclude_none=True)
        if set(changes) - {"status"} or changes.get("status", current) != current:
            raise HTTPException(400, detail=f"Cannot modify a {current.lower()} order")

    updates = data.model_dump(exclude={"items"})
    check_order_dates(data.orderDate or order["orderDate"], data.deliveryDate or order["deliveryDate"])
    if data.items is not None:
        if not data.items:
            raise HTTPException(400, detail="Order must contain at least one item")
        items = [i.model_dump() for i in data.items]
        estimates, total_cost = estimate_order(db, items)
        updates.update({"items": items, "estimates": estimates, "totalCost": total_cost})
    if data.customerName is not None:
        updates["customerName"] = sanitize(data.customerName)
    updates["updated_by"] = str(user["_id"])
    return apply_update("order", order_id, updates, "Order")


@app.delete("/api/orders/{order_id}")
def delete_order(order_id: str, user: dict = Depends(current_user)):
    order = find_or_404("order", order_id, "Order")
    if order.get("status") not in DELETABLE_ORDER_STATUSES:
        raise HTTPException(400, detail="Only pending or cancelled orders can be deleted")
    db["order"].delete_one({"_id": order["_id"]})
    logger.info(f"Order {order_id} deleted by {user['username']}")
    return {"ok": True}


# ---------- Bills ----------

@app.get("/api/bills")
def list_bills(user: dict = Depends(current_user)):
    return [with_id(b) for b in db["bill"].find({}).sort("date", -1)]


@app.post("/api/bills", status_code=201)
def create_bill(bill: Bill, user: dict = Depends(managers)):
    return {"id": create_document("bill", bill)}


@app.patch("/api/bills/{bill_id}")
def update_bill(bill_id: str, data: BillUpdate, user: dict = Depends(managers)):
    return apply_update("bill", bill_id, data.model_dump(), "Bill")


@app.delete("/api/bills/{bill_id}")
def delete_bill(bill_id: str, user: dict = Depends(admin_only)):
    return delete_or_404("bill", bill_id, "Bill")


# ---------- Shopping ----------

@app.get("/api/shopping")
def list_shopping_items(status: Optional[str] = None, user: dict = Depends(current_user)):
    q = {"status": status} if status else {}
    return [with_id(i) for i in db["shoppingitem"].find(q).sort("created_at", -1)]


@app.post("/api/shopping", status_code=201)
def create_shopping_item(item: ShoppingItem, user: dict = Depends(current_user)):
    return {"id": create_document("shoppingitem", item)}


@app.get("/api/shopping/bills")
def list_shopping_bills(user: dict = Depends(current_user)):
    return [with_id(b) for b in db["shoppingbill"].find({}).sort("date", -1)]


@app.post("/api/shopping/bills", status_code=201)
def create_shopping_bill(bill: ShoppingBill, user: dict = Depends(current_user)):
    return {"id": create_document("shoppingbill", bill)}


@app.patch("/api/shopping/bills/{bill_id}")
def update_shopping_bill(bill_id: str, data: ShoppingBillUpdate, user: dict = Depends(managers)):
    return apply_update("shoppingbill", bill_id, data.model_dump(), "Shopping bill")


@app.delete("/api/shopping/bills/{bill_id}")
def delete_shopping_bill(bill_id: str, user: dict = Depends(managers)):
    return delete_or_404("shoppingbill", bill_id, "Shopping bill")


@app.get("/api/shopping/reviews")
def list_shopping_reviews(status: Optional[str] = None, user: dict = Depends(current_user)):
    q = {"status": status} if status else {}
    return [with_id(r) for r in db["shoppingreview"].find(q).sort("date", -1)]


@app.post("/api/shopping/reviews", status_code=201)
def submit_shopping_review(data: ReviewIn, user: dict = Depends(current_user)):
    review = ShoppingReview(
        date=data.date or utcnow(),
        submittedBy=data.submittedBy or user["username"],
        itemsCount=data.itemsCount,
    )
    return {"id": create_document("shoppingreview", review)}


def decide_review(review_id: str, status: str, decider: dict):
    # only a Pending review can move, and only once
    updated = db["shoppingreview"].find_one_and_update(
        {"_id": oid(review_id), "status": "Pending"},
        {"$set": {"status": status, "decidedBy": decider["username"], "decidedAt": utcnow(), "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        find_or_404("shoppingreview", review_id, "Shopping review")
        raise HTTPException(400, detail="Only pending reviews can be approved or rejected")
    logger.info(f"Shopping review {review_id} {status.lower()} by {decider['username']}")
    return with_id(updated)


@app.post("/api/shopping/reviews/{review_id}/approve")
def approve_review(review_id: str, user: dict = Depends(managers)):
    return decide_review(review_id, "Approved", user)


@app.post("/api/shopping/reviews/{review_id}/reject")
def reject_review(review_id: str, user: dict = Depends(managers)):
    return decide_review(review_id, "Rejected", user)


@app.patch("/api/shopping/{item_id}")
def update_shopping_item(item_id: str, data: ShoppingItemUpdate, user: dict = Depends(current_user)):
    return apply_update("shoppingitem", item_id, data.model_dump(), "Shopping item")


@app.delete("/api/shopping/{item_id}")
def delete_shopping_item(item_id: str, user: dict = Depends(current_user)):
    return delete_or_404("shoppingitem", item_id, "Shopping item")


# ---------- Finance ----------

@app.get("/api/revenue")
def list_revenue(user: dict = Depends(managers)):
    return [with_id(r) for r in get_documents("revenue")]


@app.post("/api/revenue", status_code=201)
def create_revenue(entry: Revenue, user: dict = Depends(managers)):
    return {"id": create_document("revenue", entry)}


@app.get("/api/expenditure")
def list_expenditure(user: dict = Depends(managers)):
    return [with_id(e) for e in get_documents("expenditure")]


@app.post("/api/expenditure", status_code=201)
def create_expenditure(entry: Expenditure, user: dict = Depends(managers)):
    return {"id": create_document("expenditure", entry)}


@app.get("/api/summaries")
def list_summaries(user: dict = Depends(managers)):
    return [with_id(s) for s in db["monthlysummary"].find({}).sort("month", -1)]


@app.post("/api/summaries/{month}/refresh")
def refresh_summary(month: str, admin: dict = Depends(admin_only)):
    try:
        year, month_num = parse_month(month)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    return update_monthly_summary(db, year, month_num)


# ---------- Dashboard ----------

@app.get("/api/dashboard/stats")
def get_dashboard_stats(user: dict = Depends(current_user)):
    return dashboard_stats(db)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
