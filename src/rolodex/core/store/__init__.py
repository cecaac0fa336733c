"""
rolodex.core.store — SQLite persistence for person records.

Modules:
    models      Person value (identity and ordering by id)
    broadcast   Multi-subscriber snapshot channel
    database    PersonStore: connection, cache, and change feed
"""

from rolodex.core.store.broadcast import SnapshotBroadcast, Subscription
from rolodex.core.store.database import PersonStore
from rolodex.core.store.models import Person

__all__ = ["Person", "PersonStore", "SnapshotBroadcast", "Subscription"]
