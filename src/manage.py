"""Art marketplace management CLI.

Operational commands that run outside the HTTP server, typically from cron.

Usage:
    python src/manage.py expire-subscriptions   # Persist lapsed subscriptions, deactivate listings
    python src/manage.py list-plans             # Print the plan catalogue
"""

import argparse
import sys


def expire_subscriptions():
    """Run the lapsed-subscription sweep as the system actor."""
    from subscriptions.domain import subscriptions
    from subscriptions.subscription.expiry import ExpireLapsedSubscriptions

    from shared.identity import Principal

    print("Initializing subscriptions domain...")
    subscriptions.init()
    with subscriptions.domain_context():
        result = subscriptions.process(
            ExpireLapsedSubscriptions(**Principal.system().as_actor()),
            asynchronous=False,
        )

    print(f"  {result['expired']} subscription(s) expired.")
    print(f"  {result['listings_deactivated']} listing(s) deactivated.")
    print("Done.")
    return result


def list_plan_catalogue(include_inactive=False):
    """Print the subscription plans in display order."""
    from subscriptions.domain import subscriptions
    from subscriptions.plan.management import list_plans

    subscriptions.init()
    with subscriptions.domain_context():
        plans = list_plans(include_inactive=include_inactive)

    if not plans:
        print("No plans defined.")
    for plan in plans:
        flag = "" if plan.is_active else " (inactive)"
        print(
            f"  {plan.name}{flag}: {plan.max_listings} listings, "
            f"{plan.price_monthly:.2f}/month, {plan.price_yearly:.2f}/year"
        )
    return plans


def main():
    parser = argparse.ArgumentParser(description="Art marketplace management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("expire-subscriptions", help="Expire lapsed subscriptions and deactivate listings")

    plans_parser = subparsers.add_parser("list-plans", help="Print the subscription plan catalogue")
    plans_parser.add_argument("--all", action="store_true", help="Include inactive plans")

    args = parser.parse_args()

    if args.command == "expire-subscriptions":
        expire_subscriptions()
    elif args.command == "list-plans":
        list_plan_catalogue(include_inactive=args.all)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
