# productapi/handlers.py
import math
from collections import Counter
from typing import Any, Dict, Optional

from productapi.database import ProductStore
from productapi.errors import ValidationFailedError
from productapi.models import ProductDraft, ProductUpdate
from productapi.pipeline import HandlerResult, Pipeline, RequestContext

VERSION = "1.0.0"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(raw: Optional[str], default: int) -> int:
    """Parse a query value; junk falls back to the default, anything below 1 becomes 1."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return max(value, 1)


def paginate(items, page: int, limit: int):
    total = len(items)
    start = (page - 1) * limit
    return items[start:start + limit], {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
    }


def compute_stats(products) -> Dict[str, Any]:
    total_price = sum(p.price for p in products)
    in_stock = sum(1 for p in products if p.in_stock)
    return {
        "totalProducts": len(products),
        "inStockCount": in_stock,
        "outOfStockCount": len(products) - in_stock,
        "categoryBreakdown": dict(Counter(p.category for p in products)),
        "averagePrice": round(total_price / len(products), 2) if products else 0,
        "totalValue": round(total_price, 2) if products else 0,
    }


class ProductHandlers:
    """Route handlers over a single ProductStore."""

    def __init__(self, store: ProductStore):
        self.store = store

    def root(self, ctx: RequestContext):
        return {
            "success": True,
            "message": "Hello World",
            "version": VERSION,
            "endpoints": {
                "products": "/api/products",
                "search": "/api/products/search",
                "stats": "/api/products/stats",
            },
        }

    def list_products(self, ctx: RequestContext):
        query = ctx.request.query
        page = _positive_int(query.get("page"), DEFAULT_PAGE)
        limit = min(_positive_int(query.get("limit"), DEFAULT_LIMIT), MAX_LIMIT)

        products = self.store.list()
        category = query.get("category")
        if category:
            products = [p for p in products if p.category.lower() == category.lower()]

        page_items, pagination = paginate(products, page, limit)
        return {
            "success": True,
            "data": [p.to_dict() for p in page_items],
            "pagination": pagination,
        }

    def get_product(self, ctx: RequestContext):
        product = self.store.get(ctx.params["id"])
        return {"success": True, "data": product.to_dict()}

    def create_product(self, ctx: RequestContext):
        product = self.store.insert(ProductDraft.from_payload(ctx.payload))
        return HandlerResult(
            body={"success": True, "message": "Product created successfully", "data": product.to_dict()},
            status_code=201,
        )

    def update_product(self, ctx: RequestContext):
        product = self.store.replace(ctx.params["id"], ProductUpdate.from_payload(ctx.payload))
        return {"success": True, "message": "Product updated successfully", "data": product.to_dict()}

    def delete_product(self, ctx: RequestContext):
        product = self.store.delete(ctx.params["id"])
        return {"success": True, "message": "Product deleted successfully", "data": product.to_dict()}

    def search_products(self, ctx: RequestContext):
        q = ctx.request.query.get("q")
        if not q or not q.strip():
            raise ValidationFailedError('Search query parameter "q" is required')
        term = q.lower()
        results = [p for p in self.store.list() if term in p.name.lower()]
        return {
            "success": True,
            "query": q,
            "count": len(results),
            "data": [p.to_dict() for p in results],
        }

    def stats(self, ctx: RequestContext):
        return {"success": True, "data": compute_stats(self.store.list())}

    def register(self, pipeline: Pipeline):
        pipeline.add_route("GET", "/", self.root)
        pipeline.add_route("GET", "/api/products", self.list_products)
        pipeline.add_route("GET", "/api/products/search", self.search_products)
        pipeline.add_route("GET", "/api/products/stats", self.stats)
        pipeline.add_route("GET", "/api/products/{id}", self.get_product)
        pipeline.add_route("POST", "/api/products", self.create_product, protected=True, validates=True)
        pipeline.add_route("PUT", "/api/products/{id}", self.update_product, protected=True, validates=True)
        pipeline.add_route("DELETE", "/api/products/{id}", self.delete_product, protected=True)
