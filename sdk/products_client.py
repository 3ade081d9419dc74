# sdk/products_client.py
import requests
import httpx
from typing import Optional, Dict, Any, List


class ProductAPIError(Exception):
    """Raised for any non-2xx response; carries the envelope's error and details."""

    def __init__(self, status_code: int, message: str, details: Optional[List[str]] = None):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or []


def _unwrap(r) -> Dict[str, Any]:
    try:
        body = r.json()
    except ValueError:
        body = {"error": r.text}
    if r.status_code >= 400:
        raise ProductAPIError(r.status_code, body.get("error", "unknown error"), body.get("details"))
    return body


class ProductClient:
    """
    Thin client for the product catalog API.

    `session` defaults to a requests.Session; anything with the same
    get/post/put/delete signature (e.g. FastAPI's TestClient) works too.
    """

    def __init__(self, base_url: str = "http://localhost:8085", api_key: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.api_key = api_key
        if api_key:
            self.session.headers.update({"x-api-key": api_key})

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def root(self):
        return _unwrap(self.session.get(self._url("/"), timeout=self.timeout))

    # Reads
    def list_products(self, category: Optional[str] = None, page: Optional[int] = None,
                      limit: Optional[int] = None) -> Dict[str, Any]:
        params = {}
        if category:
            params["category"] = category
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        r = self.session.get(self._url("/api/products"), params=params, timeout=self.timeout)
        return _unwrap(r)

    def get_product(self, product_id) -> Dict[str, Any]:
        r = self.session.get(self._url(f"/api/products/{product_id}"), timeout=self.timeout)
        return _unwrap(r)["data"]

    def search_products(self, q: str) -> List[Dict[str, Any]]:
        r = self.session.get(self._url("/api/products/search"), params={"q": q}, timeout=self.timeout)
        return _unwrap(r)["data"]

    def stats(self) -> Dict[str, Any]:
        r = self.session.get(self._url("/api/products/stats"), timeout=self.timeout)
        return _unwrap(r)["data"]

    # Writes (need the API key)
    def create_product(self, name: str, price: float, category: str, description: str = "",
                       in_stock: bool = True) -> Dict[str, Any]:
        payload = {"name": name, "price": price, "category": category,
                   "description": description, "inStock": in_stock}
        r = self.session.post(self._url("/api/products"), json=payload, timeout=self.timeout)
        return _unwrap(r)["data"]

    def update_product(self, product_id, **fields) -> Dict[str, Any]:
        if "in_stock" in fields:
            fields["inStock"] = fields.pop("in_stock")
        r = self.session.put(self._url(f"/api/products/{product_id}"), json=fields, timeout=self.timeout)
        return _unwrap(r)["data"]

    def delete_product(self, product_id) -> Dict[str, Any]:
        r = self.session.delete(self._url(f"/api/products/{product_id}"), timeout=self.timeout)
        return _unwrap(r)["data"]

    # Async create (for concurrent demos and tests)
    async def create_product_async(self, name: str, price: float, category: str, description: str = "",
                                   in_stock: bool = True, transport: Optional[httpx.AsyncBaseTransport] = None):
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        payload = {"name": name, "price": price, "category": category,
                   "description": description, "inStock": in_stock}
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=transport) as client:
            r = await client.post("/api/products", json=payload, headers=headers)
            return _unwrap(r)["data"]
