"""Protean Engine runner for the reviews domain.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: publishes events raised by review commands
- StreamSubscriptions: feeds Ordering events into the PurchasedItems projection

Only needed when event_processing is "async" (the production overlay).

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    """Import and initialize the reviews domain."""
    from reviews.domain import reviews

    reviews.init()
    return reviews


async def run(test_mode=False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Calista Reviews engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
