"""
Persistence adapters for task logs
"""
from tasklog.repositories.base import TaskLogStore, LogFilters, LogChange
from tasklog.repositories.sqlalchemy_store import SqlAlchemyStore
from tasklog.repositories.memory_store import InMemoryStore

__all__ = ["TaskLogStore", "LogFilters", "LogChange", "SqlAlchemyStore", "InMemoryStore"]
