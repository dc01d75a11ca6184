from typing import Optional

from crewplan.domain.entities import Resource
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import resource_from_row, resource_to_row
from crewplan.storage.models import ResourceModel
from .base import ResourceRepository


class SqlAlchemyResourceRepository(ResourceRepository):
    """Repository for equipment resources."""

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, resource_id: str) -> Optional[Resource]:
        async with self.db.get_session() as session:
            row = await session.get(ResourceModel, resource_id)
            return resource_from_row(row) if row else None

    async def save(self, resource: Resource) -> Resource:
        async with self.db.get_session() as session:
            session.add(resource_to_row(resource))
            await session.flush()
        return resource
