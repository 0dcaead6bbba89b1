from folio.storage.base import LedgerStore
from folio.storage.memory import InMemoryLedgerStore

__all__ = ["LedgerStore", "InMemoryLedgerStore"]
