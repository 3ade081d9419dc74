import logging
import threading
from typing import List, Union

from productapi.errors import NotFoundError
from productapi.models import Product, ProductDraft, ProductUpdate

# This file holds the in-memory product collection and the lock guarding it.

logger = logging.getLogger(__name__)

SEED_PRODUCTS = [
    {
        "id": 1,
        "name": "Laptop",
        "description": "High-performance laptop for professionals",
        "price": 1299.99,
        "category": "Electronics",
        "inStock": True,
    },
    {
        "id": 2,
        "name": "Wireless Mouse",
        "description": "Ergonomic wireless mouse",
        "price": 29.99,
        "category": "Electronics",
        "inStock": True,
    },
    {
        "id": 3,
        "name": "Office Chair",
        "description": "Comfortable ergonomic office chair",
        "price": 349.99,
        "category": "Furniture",
        "inStock": False,
    },
    {
        "id": 4,
        "name": "Desk Lamp",
        "description": "LED desk lamp with adjustable brightness",
        "price": 45.99,
        "category": "Furniture",
        "inStock": True,
    },
    {
        "id": 5,
        "name": "Mechanical Keyboard",
        "description": "RGB mechanical gaming keyboard",
        "price": 149.99,
        "category": "Electronics",
        "inStock": True,
    },
]


def _parse_id(product_id: Union[int, str]) -> int:
    # exact ids only: "+1", " 3", "1_0" and "007" are not ids even though int() takes them
    if isinstance(product_id, int) and not isinstance(product_id, bool):
        return product_id
    if isinstance(product_id, str) and product_id.isascii() and product_id.isdigit():
        if str(int(product_id)) == product_id:
            return int(product_id)
    raise NotFoundError(f"Product with ID {product_id} not found")


class ProductStore:
    """
    Ordered in-memory product collection with an integer id counter.

    Every operation runs under one lock, so mutations are serialized and
    reads only ever see a fully applied state. Products handed out are
    copies; changing them does not touch the store.
    """

    def __init__(self, seed: bool = True):
        self._lock = threading.Lock()
        self._products: List[Product] = []
        self._next_id = 1
        if seed:
            self._load_seed()

    def _load_seed(self):
        self._products = [Product(**p) for p in SEED_PRODUCTS]
        self._next_id = max(p.id for p in self._products) + 1

    def reset(self):
        with self._lock:
            self._products = []
            self._next_id = 1
            self._load_seed()
        logger.debug("Store reset to %d seed products", len(self._products))

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def _index_of(self, product_id: Union[int, str]) -> int:
        pid = _parse_id(product_id)
        for i, p in enumerate(self._products):
            if p.id == pid:
                return i
        raise NotFoundError(f"Product with ID {product_id} not found")

    def list(self) -> List[Product]:
        with self._lock:
            return [p.model_copy() for p in self._products]

    def get(self, product_id: Union[int, str]) -> Product:
        with self._lock:
            return self._products[self._index_of(product_id)].model_copy()

    def insert(self, draft: ProductDraft) -> Product:
        with self._lock:
            product = Product(id=self._next_id, **draft.model_dump())
            self._next_id += 1
            self._products.append(product)
            logger.info("Created product %s (%s)", product.id, product.name)
            return product.model_copy()

    def replace(self, product_id: Union[int, str], update: ProductUpdate) -> Product:
        with self._lock:
            i = self._index_of(product_id)
            product = self._products[i].model_copy(update=update.changes())
            self._products[i] = product
            logger.info("Updated product %s", product.id)
            return product.model_copy()

    def delete(self, product_id: Union[int, str]) -> Product:
        with self._lock:
            product = self._products.pop(self._index_of(product_id))
            logger.info("Deleted product %s", product.id)
            return product
