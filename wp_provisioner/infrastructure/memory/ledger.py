# wp_provisioner/infrastructure/memory/ledger.py

from threading import Lock
from typing import Optional

from wp_provisioner.core.factory import TargetFactory
from wp_provisioner.core.models import Target
from wp_provisioner.core.repository import LedgerRepository


class InMemoryLedgerRepository(LedgerRepository):
    def __init__(self, factory: TargetFactory):
        self._factory = factory
        self._store: dict[str, Target] = {}
        self._lock = Lock()
        self.saves = 0
    def exists(self, domain: str) -> bool:
        return self._key(domain) in self._store
    def load(self, domain: str) -> Optional[Target]:
        return self._store.get(self._key(domain))
    def save(self, target: Target) -> None:
        if not target.db_password:
            raise ValueError("refusing to persist a ledger without a password")
        with self._lock:
            self._store[target.domain] = target
            self.saves += 1
    def _key(self, domain: str) -> str:
        return self._factory.create(domain).domain
