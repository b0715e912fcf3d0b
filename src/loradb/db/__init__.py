"""
Schema reconciliation and retention over a StoreClient.

Modules
- ensure: create or reconcile catalog tables at startup; seed defaults.
- indexes / fields: the index and field-layout reconcilers.
- retention: count-bounded rxframes trimming.
- frames: windowed rxframes reads and txframes purges.
- database: the Database facade.
"""

from .database import Database
from .ensure import ensure_table, ensure_tables, set_defaults
from .fields import ensure_fields
from .frames import get_last_rxframes, get_rxframes, purge_txframes
from .indexes import ensure_indexes
from .retention import TrimSummary, trim_rxframes, trim_tables

__all__ = [
    "Database",
    "TrimSummary",
    "ensure_fields",
    "ensure_indexes",
    "ensure_table",
    "ensure_tables",
    "get_last_rxframes",
    "get_rxframes",
    "purge_txframes",
    "set_defaults",
    "trim_rxframes",
    "trim_tables",
]
