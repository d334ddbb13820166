"""
Database Schemas for the Ski Resort Management System

Each Pydantic model maps to a MongoDB collection using the lowercase class name
as the collection name. These are the only definitions of the stored documents:
the API handlers and the maintenance scripts both import them from here.

Collections:
- employee: staff roster, keyed by employeeID
- user: login accounts, each linked to exactly one employee
- session: bearer tokens issued at login
- monthlysummary: revenue/expenditure roll-up per month
- revenue, expenditure: money in and out, inputs to monthlysummary
- ingredient: stock and unit cost of raw ingredients
- recipe: ingredients needed for one unit of a dish
- order: customer orders of recipes with cost estimates
- bill: simple bills
- shoppingitem, shoppingbill, shoppingreview: the shopping workflow
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

EMPLOYEE_ROLES = ("admin", "staff")
USER_ROLES = ("admin", "manager", "staff")
ORDER_STATUSES = ("PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED")
REVIEW_STATUSES = ("Pending", "Approved", "Rejected")


def as_naive_utc(value):
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Employee(BaseModel):
    employeeID: str = Field(..., min_length=1, description="Unique employee identifier")
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    monthlyRate: float = Field(..., ge=0, description="Monthly pay")
    startDate: datetime
    contactNumber: str
    address: Optional[str] = None
    duties: List[str] = Field(..., description="Assigned duties")
    isActive: bool
    hasUser: bool = Field(False, description="Whether a user account is linked")
    role: Literal["admin", "staff"] = "staff"

    @field_validator("employeeID")
    @classmethod
    def strip_employee_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("employeeID must not be blank")
        return v

    @field_validator("startDate")
    @classmethod
    def naive_start(cls, v):
        return as_naive_utc(v)


class User(BaseModel):
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., description="werkzeug password hash")
    firstName: str
    lastName: str
    role: Literal["admin", "manager", "staff"] = "staff"
    employeeId: str = Field(..., description="Employee document id")
    lastLogin: Optional[datetime] = None
    resetPasswordToken: Optional[str] = None
    resetPasswordExpires: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class Session(BaseModel):
    token: str
    userId: str
    expires_at: datetime


class MonthlySummary(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM")
    totalRevenue: float = 0
    totalExpenditure: float = 0
    profitOrLoss: float = 0


class Revenue(BaseModel):
    amount: float = Field(..., ge=0)
    date: datetime
    description: Optional[str] = None

    @field_validator("date")
    @classmethod
    def naive_date(cls, v):
        return as_naive_utc(v)


class Expenditure(BaseModel):
    amount: float = Field(..., ge=0)
    date: datetime
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("date")
    @classmethod
    def naive_date(cls, v):
        return as_naive_utc(v)


class Ingredient(BaseModel):
    name: str
    unit: str
    costPerUnit: float = Field(..., ge=0)
    currentQuantity: float = Field(..., ge=0)
    reorderPoint: float = Field(0, ge=0)


class RecipeIngredient(BaseModel):
    ingredientId: str
    quantity: float = Field(..., gt=0, description="Amount per unit of the recipe")
    unit: str


class Recipe(BaseModel):
    name: str
    description: Optional[str] = None
    instructions: str
    ingredients: List[RecipeIngredient] = Field(default_factory=list)


class OrderItem(BaseModel):
    recipeId: str
    quantity: float = Field(..., gt=0)


class Order(BaseModel):
    customerName: str = Field(..., min_length=1)
    orderDate: datetime
    deliveryDate: datetime
    items: List[OrderItem] = Field(..., min_length=1)
    estimates: List[dict] = Field(default_factory=list, description="Snapshot taken at creation")
    totalCost: float = Field(0, ge=0)
    status: Literal["PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED"] = "PENDING"
    created_by: Optional[str] = None

    @field_validator("orderDate", "deliveryDate")
    @classmethod
    def naive_dates(cls, v):
        return as_naive_utc(v)


class Bill(BaseModel):
    amount: float = Field(..., ge=0)
    date: datetime
    description: Optional[str] = None
    status: str = "Unpaid"

    @field_validator("date")
    @classmethod
    def naive_date(cls, v):
        return as_naive_utc(v)


class ShoppingItem(BaseModel):
    name: str
    quantity: float = Field(..., ge=0)
    unit: str
    status: str = "Pending"


class ShoppingBill(BaseModel):
    billNumber: str
    totalAmount: float = Field(..., ge=0)
    date: datetime
    status: str = "Pending"

    @field_validator("date")
    @classmethod
    def naive_date(cls, v):
        return as_naive_utc(v)


class ShoppingReview(BaseModel):
    date: datetime
    submittedBy: str
    itemsCount: int = Field(..., ge=0)
    status: Literal["Pending", "Approved", "Rejected"] = "Pending"
    decidedBy: Optional[str] = None
    decidedAt: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def naive_date(cls, v):
        return as_naive_utc(v)
