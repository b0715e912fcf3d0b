"""
Core package aggregator for loradb contracts (grammar, records, row models, catalog).

## Contracts (single source of truth)
- Grammar: table names, record type tags, storage tiers, table kinds.
- Records: tagged positional tuples, index positions, name-keyed re-projection.
- Schema: pydantic row models; each declares its table's field order.
- Tables: frozen TableDefinition catalog used by the reconcilers.
- Serde: canonical JSON for persisted values.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file or store access.
- Naming policy: enum `.value` and field names are lower_snake.

## Downstream usage
- loradb.store: persists records and table manifests; parses enum values back.
- loradb.db: reconciles live tables against `tables` and reads/trims frames.

## Examples
```python
from loradb.core.grammar import TableName
from loradb.core.records import Record, reproject
from loradb.core.tables import get_table

rx = get_table(TableName.RXFRAMES)
rx.index_positions()  # [3, 8]
reproject(Record("link", ("0011AABB", 1)), ["devaddr", "fcntup"], ["devaddr", "last_rx"])
```
"""
