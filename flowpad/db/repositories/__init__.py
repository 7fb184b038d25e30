from flowpad.db.repositories.users import UserRepository
from flowpad.db.repositories.graphs import GraphRepository
from flowpad.db.repositories.shares import ShareRepository

__all__ = ['UserRepository', 'GraphRepository', 'ShareRepository']
