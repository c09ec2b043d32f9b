# wp_provisioner/core/repository.py

from abc import ABC, abstractmethod
from typing import Optional

from wp_provisioner.core.models import Target


class LedgerRepository(ABC):
    """
    Persistence contract for the run ledger.
    """

    @abstractmethod
    def load(self, domain: str) -> Optional[Target]:
        """
        Read persisted facts for a domain.
        Returns None if no ledger exists.
        Must raise CorruptState if the ledger exists but cannot be trusted.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, target: Target) -> None:
        """
        Persist the target atomically with owner-only access.
        Must refuse a target without a password.
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, domain: str) -> bool:
        """
        Check whether a ledger exists for the domain.
        """
        raise NotImplementedError
