from abc import ABC, abstractmethod
from typing import AsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

class StorageAdapter(ABC):
    """Abstract base class for storage adapters."""

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the storage backend."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        pass

    @abstractmethod
    def get_session(self) -> AsyncContextManager[AsyncSession]:
        """Provide a transactional session."""
        pass

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """SQL dialect of the connected backend, e.g. ``postgresql`` or ``sqlite``."""
        pass
