# tests/test_cli.py
from rich.console import Console

import cli


def test_show_products_and_stats(monkeypatch):
    console = Console(record=True, width=160)
    monkeypatch.setattr(cli, "console", console)
    cli.show_products([{"id": 1, "name": "Laptop", "price": 1299.99, "category": "Electronics",
                        "inStock": True, "description": "fast"}])
    cli.show_stats({"totalProducts": 1, "inStockCount": 1, "outOfStockCount": 0,
                    "categoryBreakdown": {"Electronics": 1}, "averagePrice": 1299.99, "totalValue": 1299.99})
    out = console.export_text()
    assert "Laptop" in out
    assert "$1299.99" in out
    assert "Electronics" in out


def test_try_api_reports_api_errors(monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(cli, "console", console)

    def fail():
        raise cli.ProductAPIError(400, "Validation failed", ["Price is required and must be a non-negative number"])

    assert cli.try_api(fail) is None
    out = console.export_text()
    assert "Validation failed" in out
    assert "Price is required" in out


def test_blank_product_id_is_rejected(monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(cli, "console", console)
    monkeypatch.setattr(cli, "get_product_completer", lambda: None)
    monkeypatch.setattr(cli, "prompt_with_autocomplete", lambda message, completer=None, default="": "   ")
    assert cli.ask_product_id() is None
    assert "A product ID is required" in console.export_text()

    monkeypatch.setattr(cli, "prompt_with_autocomplete", lambda message, completer=None, default="": " 4 ")
    assert cli.ask_product_id() == "4"
