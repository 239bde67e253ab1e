"""Protean Engine runner for the ordering domain.

Processes ordering events asynchronously when PROTEAN_ENV selects async event
processing (production):
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes event handlers such as
  the order sheet sync

Usage:
    PROTEAN_ENV=production python src/server.py
"""

from protean.server.engine import Engine


def main():
    from ordering.domain import ordering

    ordering.init()
    Engine(ordering).run()


if __name__ == "__main__":
    main()
