"""
Persistence адаптеры: PostgreSQL (SQLAlchemy async) и хранилище в памяти.
"""

from editorial_review.infrastructure.persistence.in_memory import InMemoryStore, InMemoryUnitOfWork
from editorial_review.infrastructure.persistence.unit_of_work_impl import SqlAlchemyUnitOfWork

__all__ = [
    'InMemoryStore',
    'InMemoryUnitOfWork',
    'SqlAlchemyUnitOfWork',
]
