"""
FrOData SDK: Product Catalog Query Example.

This script demonstrates a complete read-only workflow against the public
ODataDemo service (https://services.odata.org/V4/OData/OData.svc):
1. Declaring the `Product` entity type and registering the `Products` set.
2. Building filtered, ordered and projected queries with the fluent API.
3. Counting, looking up a single product with its expanded categories.
4. Walking the whole collection page by page with a batch cursor.
"""

import argparse
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from frodata import (
    EntityType,
    FrODataError,
    NavigationProperty,
    ODataService,
    Property,
    ServiceConfig,
    setup_sdk_logging,
)

# Configuration Constants
SERVICE_URL = "https://services.odata.org/V4/OData/OData.svc"
SERVICE_NAME = "ODataDemo"

PRODUCT_TYPE = EntityType(
    name="Product",
    namespace="ODataDemo",
    key=["ID"],
    properties=[
        Property(name="ID", type="Edm.Int32", nullable=False),
        Property(name="Name", type="Edm.String"),
        Property(name="Description", type="Edm.String"),
        Property(name="ReleaseDate", type="Edm.DateTimeOffset", nullable=False),
        Property(name="DiscontinuedDate", type="Edm.DateTimeOffset"),
        Property(name="Rating", type="Edm.Int16", nullable=False),
        Property(name="Price", type="Edm.Double", nullable=False),
    ],
    navigation_properties=[
        NavigationProperty(
            name="Categories", type="ODataDemo.Category", collection=True
        ),
        NavigationProperty(name="Supplier", type="ODataDemo.Supplier"),
    ],
)

console = Console()


def run_catalog(url: str, max_price: float, batch_size: int):
    """
    Executes the multi-phase query workflow.

    The phases are:
    1. Filtered listing of the products below `max_price`.
    2. Count and single-entity lookup.
    3. Batched traversal of the whole collection.
    """
    with ODataService.connect(
        url, name=SERVICE_NAME, config=ServiceConfig(timeout=10.0)
    ) as service:
        products = service.register_entity_set("Products", PRODUCT_TYPE)

        # --- PHASE 1: Filtered listing ---
        console.print(Panel(f"[bold green]Products cheaper than {max_price}[/bold green]"))
        query = products.query()
        query.where(query["Price"].lt(max_price)).select("ID", "Name", "Price")
        query.order_by("Price desc").include_count()
        console.print(f"• [bold]Query:[/bold] {query}")

        page = query.execute()
        table = Table("ID", "Name", "Price")
        for product in page:
            table.add_row(str(product["ID"]), product["Name"], f"{product['Price']:.2f}")
        console.print(table)
        console.print(f"• [bold]Matching:[/bold] {page.total_count}")

        # --- PHASE 2: Count & lookup ---
        console.print(Panel("[bold green]Count & lookup[/bold green]"))
        console.print(f"• [bold]Total products:[/bold] {products.count()}")
        bread = products.query().expand("Categories").find(0)
        console.print(f"• [bold]Product 0:[/bold] {bread['Name']}")
        console.print(
            f"• [bold]Categories:[/bold] {[c['Name'] for c in bread['Categories']]}"
        )

        # --- PHASE 3: Batched traversal ---
        console.print(Panel(f"[bold green]Batches of {batch_size}[/bold green]"))
        cursor = products.query().order_by("ID").in_batches(of=batch_size)
        for batch in cursor.pages():
            console.print(f"  - {len(batch)} products: {[p['Name'] for p in batch]}")


def main():
    parser = argparse.ArgumentParser(description="Query the ODataDemo catalog")
    parser.add_argument("--url", default=SERVICE_URL, help="service root URL")
    parser.add_argument("--max-price", type=float, default=20.0)
    parser.add_argument("--batch-size", type=int, default=5)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    setup_sdk_logging(level=args.log_level, pretty=True, console=console)
    try:
        run_catalog(args.url, args.max_price, args.batch_size)
    except FrODataError as e:
        console.print(f"[bold red]Query Failed:[/bold red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
