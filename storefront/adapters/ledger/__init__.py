"""Order ledger adapters.

The ledger is the append-only record of completed purchases and the source of
truth for purchase-window queries. Services depend on ``AbstractLedger`` so
the storage backend can change without touching the order path.
"""
