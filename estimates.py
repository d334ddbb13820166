"""
Order cost and ingredient estimates.

A recipe lists how much of each ingredient one unit needs. For an order line
of `quantity` units the line cost is the recipe unit cost times quantity, and
every ingredient requirement scales the same way. Requirements are then summed
across lines so that two dishes sharing an ingredient are checked against the
stock together.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from bson import ObjectId
from bson.errors import InvalidId

logger = logging.getLogger(__name__)


class EstimateError(ValueError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _object_ids(raw_ids: Iterable[str]) -> List[ObjectId]:
    ids = []
    for raw in raw_ids:
        try:
            ids.append(ObjectId(raw))
        except (InvalidId, TypeError):
            continue
    return ids


def load_recipes(db, items) -> Tuple[Dict[str, dict], Dict[str, dict]]:
    """Fetch the recipes referenced by `items` and the ingredients they use, keyed by string id."""
    recipe_ids = _object_ids(item["recipeId"] for item in items)
    recipes = {str(r["_id"]): r for r in db["recipe"].find({"_id": {"$in": recipe_ids}})}
    ingredient_ids = _object_ids(
        ing["ingredientId"] for r in recipes.values() for ing in r.get("ingredients", [])
    )
    ingredients = {str(i["_id"]): i for i in db["ingredient"].find({"_id": {"$in": ingredient_ids}})}
    return recipes, ingredients


def recipe_unit_cost(recipe: dict, ingredients: Dict[str, dict]) -> float:
    total = 0.0
    for ing in recipe.get("ingredients", []):
        stock = ingredients.get(str(ing["ingredientId"])) or {}
        total += float(stock.get("costPerUnit") or 0) * float(ing.get("quantity") or 0)
    return round(total, 2)


def estimate_line(item: dict, recipe: dict, ingredients: Dict[str, dict]) -> dict:
    quantity = float(item["quantity"])
    unit_cost = recipe_unit_cost(recipe, ingredients)
    lines = []
    for ing in recipe.get("ingredients", []):
        ing_id = str(ing["ingredientId"])
        stock = ingredients.get(ing_id) or {}
        required = float(ing["quantity"]) * quantity
        available = float(stock.get("currentQuantity") or 0)
        lines.append({
            "ingredientId": ing_id,
            "name": stock.get("name", "Unknown ingredient"),
            "unit": ing.get("unit"),
            "required": required,
            "available": available,
            "status": "available" if available >= required else "insufficient",
        })
    return {
        "recipeId": str(item["recipeId"]),
        "name": recipe.get("name"),
        "quantity": quantity,
        "unitCost": unit_cost,
        "totalCost": round(unit_cost * quantity, 2),
        "ingredients": lines,
    }


def aggregate_ingredients(estimates: List[dict]) -> List[dict]:
    """Sum ingredient requirements over all order lines."""
    totals: Dict[str, dict] = {}
    for line in estimates:
        for ing in line.get("ingredients", []):
            entry = totals.setdefault(ing["ingredientId"], {
                "ingredientId": ing["ingredientId"],
                "name": ing["name"],
                "unit": ing.get("unit"),
                "required": 0.0,
                "available": ing["available"],
            })
            entry["required"] += ing["required"]
    for entry in totals.values():
        entry["status"] = "available" if entry["available"] >= entry["required"] else "insufficient"
    return sorted(totals.values(), key=lambda e: e["name"])


def estimate_order(db, items: List[dict], check_stock: bool = True) -> Tuple[List[dict], float]:
    """Return (estimates, totalCost) for order lines; raises EstimateError on unknown recipes or short stock."""
    recipes, ingredients = load_recipes(db, items)
    estimates = []
    for index, item in enumerate(items):
        recipe = recipes.get(str(item["recipeId"]))
        if not recipe:
            raise EstimateError(f"Recipe not found for item at index {index}", status_code=404)
        estimates.append(estimate_line(item, recipe, ingredients))

    if check_stock:
        short = [e for e in aggregate_ingredients(estimates) if e["status"] == "insufficient"]
        if short:
            names = ", ".join(e["name"] for e in short)
            raise EstimateError(f"Insufficient stock for ingredient(s): {names}")

    total_cost = round(sum(e["totalCost"] for e in estimates), 2)
    return estimates, total_cost


def current_estimates(db, order: dict) -> List[dict]:
    """Recompute every line of a stored order against today's recipes and stock."""
    items = order.get("items", [])
    recipes, ingredients = load_recipes(db, items)
    result = []
    for item in items:
        recipe = recipes.get(str(item["recipeId"]))
        if not recipe:
            result.append({
                "recipeId": str(item["recipeId"]),
                "quantity": item["quantity"],
                "currentStatus": "Recipe not found",
                "totalCost": 0,
                "ingredients": [],
            })
            continue
        line = estimate_line(item, recipe, ingredients)
        line["currentStatus"] = "ready" if all(i["status"] == "available" for i in line["ingredients"]) else "pending"
        result.append(line)
    return result
