from .base import Repository, not_deleted
from .unit_of_work import UnitOfWork

__all__ = ["Repository", "UnitOfWork", "not_deleted"]
