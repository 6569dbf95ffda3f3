from leasedesk.repositories.base import SqlAlchemyRepository

__all__ = ["SqlAlchemyRepository"]
