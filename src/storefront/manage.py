"""Storefront admin CLI.

Usage:
    python -m storefront.manage serve [--host HOST] [--port PORT]
    python -m storefront.manage seed                  # Load the demo catalogue
    python -m storefront.manage reconcile-campaigns   # Complete campaigns past their end date
    python -m storefront.manage award-points ORDER_ID # Retry a loyalty award
    python -m storefront.manage roi CAMPAIGN_ID       # Print campaign revenue and ROI

The resource store is the one selected by STOREFRONT_ENV / storefront.toml;
against the in-memory store these commands only affect the current process.
"""

import argparse
import sys

DEMO_PRODUCTS = [
    {"name": "Wireless Earbuds", "price": "2499.00", "stock": 40, "category": "Audio", "rating": 4.3},
    {"name": "Bluetooth Speaker", "price": "3299.00", "stock": 18, "category": "Audio", "rating": 4.1},
    {"name": "Smartwatch", "price": "5999.00", "stock": 12, "category": "Wearables", "rating": 4.4},
    {"name": "USB-C Charger 65W", "price": "1499.00", "stock": 60, "category": "Accessories", "rating": 4.6},
    {"name": "Mechanical Keyboard", "price": "4599.00", "stock": 7, "category": "Peripherals", "rating": 4.7},
    {"name": "Wireless Mouse", "price": "899.00", "stock": 5, "category": "Peripherals", "rating": 4.0},
]


def serve(host: str, port: int) -> None:
    import uvicorn

    from storefront.app import create_app
    from storefront.utils.logging import configure_logging

    configure_logging()
    uvicorn.run(create_app(), host=host, port=port)


def seed(storefront) -> None:
    """Add the demo products that are not in the catalogue yet."""
    existing = {product.name for product in storefront.catalogue.refresh()}
    for fields in DEMO_PRODUCTS:
        if fields["name"] in existing:
            print(f"  {fields['name']} already present.")
            continue
        product = storefront.catalogue.add_product(**fields)
        print(f"  Added {product.name} ({product.id}).")
    print("Done.")


def reconcile_campaigns(storefront) -> None:
    for campaign in storefront.campaigns.list(include_completed=True):
        print(f"  {campaign.id}  {campaign.name:<30} {campaign.status:<10} ends {campaign.end_date}")
    print("Done.")


def award_points(storefront, order_id: str) -> None:
    points = storefront.loyalty.award(order_id)
    print(f"Credited {points} point(s) for order {order_id}." if points else f"Order {order_id} was already credited.")


def show_roi(storefront, campaign_id: str) -> None:
    result = storefront.campaigns.roi(campaign_id)
    print(f"Revenue: {result.revenue}  Budget: {result.budget}  ROI: {result.roi}  Orders: {result.order_count}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("seed", help="Load the demo catalogue")
    subparsers.add_parser("reconcile-campaigns", help="Complete campaigns whose end date has passed")

    award_parser = subparsers.add_parser("award-points", help="Retry the loyalty award for a delivered order")
    award_parser.add_argument("order_id")

    roi_parser = subparsers.add_parser("roi", help="Show revenue and ROI for a campaign")
    roi_parser.add_argument("campaign_id")

    args = parser.parse_args(argv)

    if args.command == "serve":
        serve(args.host, args.port)
        return 0

    from storefront.container import get_storefront
    from storefront.domain import init_domain
    from storefront.shared.exceptions import StorefrontError, ValidationError

    domain = init_domain()
    storefront = get_storefront()
    try:
        with domain.domain_context():
            if args.command == "seed":
                seed(storefront)
            elif args.command == "reconcile-campaigns":
                reconcile_campaigns(storefront)
            elif args.command == "award-points":
                award_points(storefront, args.order_id)
            elif args.command == "roi":
                show_roi(storefront, args.campaign_id)
    except (StorefrontError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
