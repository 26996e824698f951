"""Unit of Work Interface

Transaction boundary shared by the repositories of one request.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Unit of work contract

    Exiting the context without a commit rolls back anything pending.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
