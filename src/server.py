"""Protean Engine runner for the florist domain.

Starts the Engine that processes messages asynchronously when
``PROTEAN_ENV=production`` selects async processing:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes command and event handlers
  (including the order notification fan-out and token pruning)

Usage:
    python src/server.py
    python src/server.py --test-mode   # process pending messages and exit
"""

import argparse

from protean.server.engine import Engine


def main():
    parser = argparse.ArgumentParser(description="Florist Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process messages currently queued, then stop",
    )
    args = parser.parse_args()

    from florist.domain import florist

    florist.init()
    engine = Engine(florist, test_mode=args.test_mode)
    engine.run()


if __name__ == "__main__":
    main()
