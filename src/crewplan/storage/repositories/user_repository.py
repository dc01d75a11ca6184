from typing import List, Optional

from sqlalchemy import select

from crewplan.domain.entities import Employee
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import employee_from_row, employee_to_row
from crewplan.storage.models import UserModel
from .base import UserRepository


class SqlAlchemyUserRepository(UserRepository):
    """Repository for employees."""

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, user_id: str) -> Optional[Employee]:
        async with self.db.get_session() as session:
            row = await session.get(UserModel, user_id)
            return employee_from_row(row) if row else None

    async def find_active_by_tenant(self, tenant_id: str) -> List[Employee]:
        stmt = (
            select(UserModel)
            .where(UserModel.tenant_id == tenant_id, UserModel.is_active.is_(True))
            .order_by(UserModel.full_name)
        )
        async with self.db.get_session() as session:
            rows = (await session.scalars(stmt)).all()
            return [employee_from_row(row) for row in rows]

    async def save(self, employee: Employee) -> Employee:
        async with self.db.get_session() as session:
            session.add(employee_to_row(employee))
            await session.flush()
        return employee
