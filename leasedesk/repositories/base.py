"""
Generic SQLAlchemy repository.

The lease engine reaches its tables only through get / add / update / delete /
query, so the persistence layer can be swapped without touching the services.
Repositories flush but never commit; the service operation owns the
transaction.
"""
import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from leasedesk.db.base import Base

T = TypeVar("T", bound=Base)


class SqlAlchemyRepository(Generic[T]):
    """Repository bound to one mapped class and one session."""

    def __init__(self, session: Session, entity_class: Type[T]):
        self.session = session
        self.entity_class = entity_class
        self.entity_name = entity_class.__name__
        self.logger = logging.getLogger(f"{__name__}.{self.entity_name}")

    def get(self, entity_id: Any) -> Optional[T]:
        if entity_id is None:
            return None
        return self.session.get(self.entity_class, entity_id)

    def add(self, entity: T) -> T:
        self.session.add(entity)
        self.session.flush()
        self.logger.debug(f"Added {self.entity_name} id={getattr(entity, 'id', None)}")
        return entity

    def update(self, entity: T) -> T:
        # flush so version/integrity conflicts surface at the call site
        self.session.add(entity)
        self.session.flush()
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)
        self.session.flush()

    def query(self, *criteria: Any, order_by: Any = None) -> List[T]:
        stmt = select(self.entity_class)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = _ordered(stmt, order_by)
        return list(self.session.scalars(stmt).unique().all())

    def first(self, *criteria: Any, order_by: Any = None) -> Optional[T]:
        stmt = _ordered(select(self.entity_class).where(*criteria), order_by)
        return self.session.scalars(stmt.limit(1)).unique().first()


def _ordered(stmt, order_by: Any):
    if order_by is None:
        return stmt
    if isinstance(order_by, (list, tuple)):
        return stmt.order_by(*order_by)
    return stmt.order_by(order_by)
