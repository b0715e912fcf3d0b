"""
loradb: schema reconciliation and rxframes retention for a LoRaWAN server store.

Subpackages
- loradb.core: catalog, record model, row models (zero-IO).
- loradb.store: StoreClient interface, ParquetStore, StoreSettings.
- loradb.db: ensure/trim/read/purge passes and the Database facade.
"""

__version__ = "0.1.0"
