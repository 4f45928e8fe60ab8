"""Shared step order: document shape, merge rules, pull/push and debouncing."""

from cuelock.core.sync.debounce import DEFAULT_PUSH_DEBOUNCE_MS, OrderChangeNotifier
from cuelock.core.sync.memory import MemorySessionStore
from cuelock.core.sync.order_sync import OrderSync
from cuelock.core.sync.orders import (
    SERVER_TIMESTAMP,
    OrderDocument,
    apply_order,
    apply_orders,
    current_orders,
)
from cuelock.core.sync.protocols import SessionStore

__all__ = [
    "DEFAULT_PUSH_DEBOUNCE_MS",
    "SERVER_TIMESTAMP",
    "MemorySessionStore",
    "OrderChangeNotifier",
    "OrderDocument",
    "OrderSync",
    "SessionStore",
    "apply_order",
    "apply_orders",
    "current_orders",
]
