"""
Secrets Backend Interface

Defines the abstract interface for secrets backends, so the kernel
keyring can be swapped for another store behind the same calls.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class SecretItem:
    """Represents a stored secret."""
    id: int
    title: str
    keyring: str
    keytype: str
    value: str


class SecretsBackend(ABC):
    """
    Abstract base class for secrets backends.

    Implementations provide access to a specific secrets store.
    """

    backend_type: str = "base"

    def __init__(self, config: dict):
        """
        Initialize the backend.

        Args:
            config: Backend-specific configuration dict
        """
        self.config = config

    @abstractmethod
    async def connect(self) -> bool:
        """
        Check that the store is usable.

        Returns:
            True if the store can be reached
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the store."""
        pass

    @abstractmethod
    async def get(self, item: str) -> str:
        """
        Get a secret value.

        Args:
            item: Secret name

        Returns:
            The secret value

        Raises:
            KeyError: If the secret is not found
        """
        pass

    @abstractmethod
    async def set(self, title: str, value: str) -> SecretItem:
        """
        Create or replace a secret.

        Args:
            title: Secret name
            value: Secret value

        Returns:
            The stored SecretItem
        """
        pass

    @abstractmethod
    async def delete(self, item: str) -> bool:
        """
        Delete a secret.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def list(self, prefix: Optional[str] = None) -> List[str]:
        """
        List secret names.

        Args:
            prefix: Optional prefix to filter by
        """
        pass

    @abstractmethod
    async def exists(self, item: str) -> bool:
        """Check if a secret exists."""
        pass
