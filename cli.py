# cli.py
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.columns import Columns
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter, PathCompleter
from prompt_toolkit.styles import Style as PromptStyle

from barcode_inventory.config import get_settings
from sdk.analytics import AnalyticsState
from sdk.board import BoardState
from sdk.inventory_client import InventoryAPIError, InventoryClient
from sdk.scan import ScanPipeline, ScanResult, make_extractor

console = Console()

# Status line shown above the menu
status_message = "Ready"

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products"):
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
    table.add_column("Barcode", style="dim", width=16)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=16)

    for p in products:
        table.add_row(
            p.get("barcode", "N/A"),
            p.get("name", "N/A"),
            f"${float(p.get('price') or 0):.2f}",
            p.get("category", "N/A")
        )
    console.print(table)


def show_board(board: BoardState, search: str = ""):
    panels = []
    for category, products in board.columns(search).items():
        lines = [f"[bold]{p.get('name', '?')}[/bold]\n[dim]{p['barcode']}  ${float(p.get('price') or 0):.2f}[/dim]"
                 for p in products]
        body = "\n\n".join(lines) if lines else "[italic dim]empty[/italic dim]"
        panels.append(Panel(body, title=f"{category} ({len(products)})", border_style="cyan", width=32))
    title = "🗂️ Product Board" + (f" - matching '{search}'" if search else "")
    console.print(Panel(Columns(panels), title=title, border_style="magenta"))


def show_scan(result):
    if not result.ok:
        console.print(show_status(result.error, False))
        return
    p = result.product
    heading = "Product Found!" if result.created else "Product Already Exists!"
    style = "green" if result.created else "yellow"
    console.print(Panel.fit(
        f"Barcode: [bold]{p['barcode']}[/bold]\n"
        f"Product: {p.get('description') or p.get('name')}\n"
        f"Category: {p.get('category')}",
        title=f"[{style}]{heading}[/{style}]",
        border_style=style
    ))


def show_analytics(view: AnalyticsState, category_filter: str = ""):
    if view.error:
        console.print(show_status(view.error, False))

    counts = Table(title="📊 Products per Category", box=box.ROUNDED, header_style="bold cyan")
    counts.add_column("Category", width=24)
    counts.add_column("Count", justify="right", width=8)
    if not view.category_counts:
        counts.add_row("[italic]No categories found[/italic]", "")
    for item in view.category_counts:
        counts.add_row(item["category"], str(item["count"]))
    counts.add_row("[bold]Total[/bold]", f"[bold]{view.total}[/bold]")
    console.print(counts)

    title = "🕑 Recently Added"
    if category_filter:
        title += f" (category contains '{category_filter}')"
    show_products(view.recent(category_filter), title=title)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# Spinner wrapper
# ---------------------------
def with_spinner(fn, *args, **kwargs):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        progress.add_task(description="Processing...", total=None)
        return fn(*args, **kwargs)


def report(view, ok: bool, success_msg: str) -> None:
    """Update the status line from a view's outcome."""
    global status_message
    if ok:
        status_message = success_msg
    elif view.error:
        status_message = f"Error: {view.error}"
        view.dismiss_error()


# ---------------------------
# Autocompletion helpers
# ---------------------------
def barcode_completer(board: BoardState):
    words = [p["barcode"] for p in board.products] + [p.get("name", "") for p in board.products]
    return WordCompleter([w for w in words if w], ignore_case=True)


def category_completer(board: BoardState):
    return WordCompleter(board.categories, ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 0.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            value = float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")
            continue
        if value < 0:
            console.print("[red]Price cannot be negative.[/red]")
            continue
        return value


def lookup_barcode(client: InventoryClient, barcode: str) -> ScanResult:
    """Typed-in counterpart of a scan: find-or-create without an image."""
    barcode = barcode.strip()
    if not barcode:
        return ScanResult(error="Barcode cannot be empty.")
    try:
        product, created = client.lookup_product(barcode)
    except InventoryAPIError as e:
        return ScanResult(barcode=barcode, error=e.message)
    return ScanResult(barcode=barcode, product=product, created=created)


def resolve_barcode(board: BoardState, raw: str) -> Optional[str]:
    """Accept either a barcode or a product name typed at the prompt."""
    raw = raw.strip()
    if board.find(raw):
        return raw
    for p in board.products:
        if (p.get("name") or "").lower() == raw.lower():
            return p["barcode"]
    return None


# ---------------------------
# Layout and Header
# ---------------------------
def create_header(base_url: str):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🏷️ Barcode Inventory",
        f"[bold blue]{base_url}[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu(client: InventoryClient, pipeline: ScanPipeline):
    global status_message

    board = BoardState(client)
    analytics = AnalyticsState(client)

    console.clear()
    console.print(create_header(client.base_url))
    with_spinner(board.load)
    report(board, board.error is None, "Board loaded")

    while True:
        if status_message:
            console.print(show_status(status_message, not status_message.startswith("Error")))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "🗂️ Show board", "5", "🏷️ Add category"),
            ("2", "🔍 Search board", "6", "➕ Register product"),
            ("3", "📷 Scan barcode image", "7", "📊 Analytics"),
            ("4", "↔️ Move product", "8", "🔄 Reload"),
            ("9", "🔎 Look up barcode", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 10)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            show_board(board)

        elif choice == "2":
            term = prompt_with_autocomplete("Search products by name")
            show_board(board, term)
            status_message = f"{len(board.visible_products(term))} product(s) match '{term}'"

        elif choice == "3":
            path = prompt_with_autocomplete("Image file", completer=PathCompleter(expanduser=True)).strip()
            result = with_spinner(pipeline.scan_file, path)
            show_scan(result)
            if result.ok:
                board.add_scanned(result.product)
                with_spinner(board.refresh_products)
                status_message = f"Scanned {result.barcode}"
            else:
                status_message = f"Error: {result.error}"

        elif choice == "4":
            raw = prompt_with_autocomplete("Product (barcode or name)", completer=barcode_completer(board))
            barcode = resolve_barcode(board, raw)
            if barcode is None:
                status_message = f"Error: no product '{raw}' on the board"
                continue
            source = board.find(barcode)["category"]
            destination = prompt_with_autocomplete("Move to category", completer=category_completer(board)).strip()
            moved = with_spinner(board.on_drag_end, barcode, source, destination or None)
            if not moved and board.error is None:
                status_message = "Nothing to move"
            else:
                report(board, moved, f"Moved {barcode} to '{destination}'")
            if moved:
                show_board(board)

        elif choice == "5":
            name = prompt_with_autocomplete("New category name")
            ok = with_spinner(board.add_category, name)
            report(board, ok, f"Category '{name.strip()}' added")

        elif choice == "6":
            barcode = prompt_with_autocomplete("Barcode").strip()
            name = prompt_with_autocomplete("Name")
            description = prompt_with_autocomplete("Description")
            price = ask_float("💰 Price", default=0.0)
            category = prompt_with_autocomplete("🏷️ Category", completer=category_completer(board), default="Uncategorized")
            try:
                product = with_spinner(client.register_product, barcode, name, description, price, category.strip() or None)
            except InventoryAPIError as e:
                status_message = f"Error: {e}"
                continue
            board.add_scanned(product)
            with_spinner(board.refresh_products)
            status_message = f"Product {product['barcode']} registered"

        elif choice == "7":
            ok = with_spinner(analytics.load)
            category_filter = prompt_with_autocomplete("Filter recent by category (blank for all)").strip()
            show_analytics(analytics, category_filter)
            report(analytics, ok, "Analytics loaded")

        elif choice == "8":
            with_spinner(board.load)
            report(board, board.error is None, "Board reloaded")

        elif choice == "9":
            barcode = prompt_with_autocomplete("Barcode", completer=barcode_completer(board)).strip()
            result = with_spinner(lookup_barcode, client, barcode)
            show_scan(result)
            if result.ok:
                board.add_scanned(result.product)
                status_message = f"Looked up {barcode}"
            else:
                status_message = f"Error: {result.error}"

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Goodbye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main():
    settings = get_settings()
    client = InventoryClient(base_url=settings.API_BASE_URL, timeout=settings.API_TIMEOUT)
    pipeline = ScanPipeline(client, make_extractor(settings.SCAN_STRATEGY, settings.OCR_LANG))
    try:
        menu(client, pipeline)
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
