# cli.py - interactive catalog CLI with autocomplete
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.products_client import ProductClient, ProductAPIError

console = Console()
c = ProductClient(
    base_url=os.getenv("PRODUCTAPI_URL", "http://127.0.0.1:8085"),
    api_key=os.getenv("PRODUCTAPI_API_KEY"),
)

status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

ENDPOINTS = [
    ("GET", "/"),
    ("GET", "/api/products"),
    ("GET", "/api/products/:id"),
    ("POST", "/api/products"),
    ("PUT", "/api/products/:id"),
    ("DELETE", "/api/products/:id"),
    ("GET", "/api/products/search?q=query"),
    ("GET", "/api/products/stats"),
]


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=22)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=14)
    table.add_column("Stock", width=8)
    table.add_column("Description", width=30)

    for p in products:
        stock = "[green]yes[/green]" if p.get("inStock") else "[red]no[/red]"
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            f"${p.get('price', 0):.2f}",
            p.get("category", "N/A"),
            stock,
            p.get("description", "")
        )
    console.print(table)


def show_pagination(pagination: Dict[str, Any]):
    console.print(
        f"[dim]Page {pagination.get('page')} of {pagination.get('totalPages')} "
        f"({pagination.get('total')} products, {pagination.get('limit')} per page)[/dim]"
    )


def show_stats(stats: Dict[str, Any]):
    table = Table(title="📊 Catalog Stats", box=box.ROUNDED, header_style="bold yellow", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total products", str(stats.get("totalProducts", 0)))
    table.add_row("In stock", str(stats.get("inStockCount", 0)))
    table.add_row("Out of stock", str(stats.get("outOfStockCount", 0)))
    table.add_row("Average price", f"${float(stats.get('averagePrice', 0)):.2f}")
    table.add_row("Total value", f"${float(stats.get('totalValue', 0)):.2f}")
    for category, count in stats.get("categoryBreakdown", {}).items():
        table.add_row(f"  {category}", str(count))
    console.print(table)


def show_endpoints():
    table = Table(title="Available endpoints", box=box.SIMPLE, header_style="bold blue")
    table.add_column("Method", style="bold cyan", width=8)
    table.add_column("Path")
    for method, path in ENDPOINTS:
        table.add_row(method, path)
    console.print(table)
    console.print("[dim]POST, PUT and DELETE require the x-api-key header (PRODUCTAPI_API_KEY).[/dim]")


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with error reporting
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except ProductAPIError as e:
        status_message = f"Error: {e.message}"
        console.print(show_status(f"Error ({e.status_code}): {e.message}", False))
        for detail in e.details:
            console.print(f"  [red]- {detail}[/red]")
        return None
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


def get_product_completer():
    global product_cache
    if not product_cache:
        listing = try_api(c.list_products, limit=100) or {}
        product_cache = listing.get("data", [])
    ids = [str(p.get("id", "")) for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_category_completer():
    return WordCompleter(sorted({p.get("category", "") for p in product_cache if p.get("category")}), ignore_case=True)


def refresh_cache():
    global product_cache
    listing = try_api(c.list_products, limit=100) or {}
    product_cache = listing.get("data", [])


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Product Catalog",
        f"[bold blue]{c.base_url}[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_product_id() -> Optional[str]:
    """Prompt for a product id; a blank answer is rejected instead of hitting the list route."""
    pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
    if not pid:
        console.print("[red]A product ID is required.[/red]")
        return None
    return pid


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_product_fields(current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    current = current or {}
    name = prompt_with_autocomplete("Name", default=current.get("name", ""))
    description = prompt_with_autocomplete("Description", default=current.get("description", ""))
    price = ask_float("💰 Price", default=current.get("price", 10.0))
    category = prompt_with_autocomplete("🏷️ Category", completer=get_category_completer(),
                                        default=current.get("category", ""))
    in_stock = Confirm.ask("In stock?", default=current.get("inStock", True))
    return {"name": name, "description": description, "price": price, "category": category, "in_stock": in_stock}


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, product_cache

    console.clear()
    console.print(create_header())
    show_endpoints()
    refresh_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "5", "✏️ Update product"),
            ("2", "🔍 Search products", "6", "🗑️ Delete product"),
            ("3", "ℹ️ Get product by ID", "7", "📊 Stats"),
            ("4", "➕ Create product", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 8)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            category = prompt_with_autocomplete("Category filter (blank for all)", completer=get_category_completer())
            page = Prompt.ask("Page", default="1")
            limit = Prompt.ask("Per page", default="10")
            listing = try_api(c.list_products, category or None, page, limit, success_msg="Products loaded")
            if listing is not None:
                show_products(listing["data"])
                show_pagination(listing["pagination"])

        elif choice == "2":
            term = prompt_with_autocomplete("Enter search term")
            res = try_api(c.search_products, term, success_msg=f"Search for '{term}' completed")
            if res is not None:
                show_products(res, title=f"🔍 Results for '{term}'")

        elif choice == "3":
            pid = ask_product_id()
            resp = try_api(c.get_product, pid, success_msg=f"Product {pid} loaded") if pid else None
            if resp:
                show_products([resp])

        elif choice == "4":
            fields = ask_product_fields()
            resp = try_api(c.create_product, success_msg=f"Product '{fields['name']}' created", **fields)
            if resp:
                show_products([resp])
                refresh_cache()

        elif choice == "5":
            pid = ask_product_id()
            current = try_api(c.get_product, pid) if pid else None
            if current:
                fields = ask_product_fields(current)
                resp = try_api(c.update_product, pid, success_msg=f"Product {pid} updated", **fields)
                if resp:
                    show_products([resp])
                    refresh_cache()

        elif choice == "6":
            pid = ask_product_id()
            if pid and Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                resp = try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted")
                if resp:
                    refresh_cache()

        elif choice == "7":
            stats = try_api(c.stats, success_msg="Stats loaded")
            if stats:
                show_stats(stats)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Goodbye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
