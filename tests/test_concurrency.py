# tests/test_concurrency.py
import asyncio
import threading

import httpx

from productapi.config import Settings
from productapi.database import ProductStore
from productapi.main import create_app
from productapi.models import ProductDraft
from sdk.products_client import ProductClient

API_KEY = "test-key"
app = create_app(settings=Settings(api_key=API_KEY))


async def _create_many(n):
    c = ProductClient(base_url="http://test", api_key=API_KEY)
    transport = httpx.ASGITransport(app=app)
    return await asyncio.gather(*[
        c.create_product_async(f"Item {i}", i, "Bulk", transport=transport) for i in range(n)
    ])


def test_concurrent_creates_get_unique_ids():
    app.state.store.reset()
    created = asyncio.run(_create_many(20))
    ids = [p["id"] for p in created]
    assert len(set(ids)) == 20
    assert sorted(ids) == list(range(6, 26))
    assert len(app.state.store) == 25


def test_threaded_inserts_do_not_lose_updates():
    store = ProductStore()

    def worker(n):
        for i in range(50):
            store.insert(ProductDraft(name=f"t{n}-{i}", price=1, category="Threads"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [p.id for p in store.list()]
    assert len(ids) == 5 + 8 * 50
    assert len(set(ids)) == len(ids)
