# File: src/parking_lot_system/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Parking Lot System

Repositories keep issued objects addressable by id. Everything lives in
process memory; nothing is persisted.

1. Repository - generic interface
2. InMemoryRepository - dict-backed implementation
3. TicketRepository - issued tickets and which of them are still active
"""

from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, Set, TypeVar
import logging

from ..domain.models import Ticket

T = TypeVar('T')
ID = TypeVar('ID')


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T, ID]):
    """Generic repository interface"""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Add a new entity"""
        pass

    @abstractmethod
    def get(self, id: ID) -> Optional[T]:
        """Get entity by ID"""
        pass

    @abstractmethod
    def get_all(self, skip: int = 0, limit: Optional[int] = None) -> List[T]:
        """Get all entities with optional pagination"""
        pass

    @abstractmethod
    def delete(self, id: ID) -> bool:
        """Delete entity by ID"""
        pass

    @abstractmethod
    def exists(self, id: ID) -> bool:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


# ============================================================================
# IN-MEMORY REPOSITORIES
# ============================================================================

class InMemoryRepository(Repository[T, ID]):
    """Dict-backed repository; entities are keyed by their `id_attribute`"""

    id_attribute = "id"

    def __init__(self):
        self._storage: Dict[ID, T] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def _key(self, entity: T) -> ID:
        return getattr(entity, self.id_attribute)

    def add(self, entity: T) -> T:
        entity_id = self._key(entity)
        if entity_id in self._storage:
            raise KeyError(f"Entity {entity_id} already exists")

        self._storage[entity_id] = entity
        self._logger.debug(f"Added entity {entity_id}")
        return entity

    def get(self, id: ID) -> Optional[T]:
        return self._storage.get(id)

    def get_all(self, skip: int = 0, limit: Optional[int] = None) -> List[T]:
        """Entities in insertion order"""
        items = list(self._storage.values())
        if limit is None:
            return items[skip:]
        return items[skip:skip + limit]

    def delete(self, id: ID) -> bool:
        if id in self._storage:
            del self._storage[id]
            self._logger.debug(f"Deleted entity {id}")
            return True
        return False

    def exists(self, id: ID) -> bool:
        return id in self._storage

    def count(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        self._storage.clear()


class TicketRepository(InMemoryRepository[Ticket, int]):
    """
    Registry of issued tickets

    Every ticket stays on record once issued. Using a ticket to unpark marks
    it used, so it can never be presented twice.
    """

    id_attribute = "ticket_id"

    def __init__(self):
        super().__init__()
        self._used: Set[int] = set()

    def is_active(self, ticket: Ticket) -> bool:
        """True if this exact ticket was issued and has not been used yet"""
        return ticket.ticket_id not in self._used and self._storage.get(ticket.ticket_id) == ticket

    def mark_used(self, ticket_id: int) -> bool:
        """Invalidate an issued ticket; False if it is unknown or already used"""
        if ticket_id not in self._storage or ticket_id in self._used:
            return False
        self._used.add(ticket_id)
        self._logger.debug(f"Marked ticket {ticket_id} as used")
        return True

    def get_active(self) -> List[Ticket]:
        """Active tickets in issue order"""
        return [ticket for ticket in self._storage.values() if ticket.ticket_id not in self._used]

    def active_count(self) -> int:
        return len(self._storage) - len(self._used)

    def delete(self, id: int) -> bool:
        self._used.discard(id)
        return super().delete(id)

    def clear(self) -> None:
        super().clear()
        self._used.clear()

    def find_by_vehicle_number(self, vehicle_number: int) -> Optional[Ticket]:
        """Active ticket held by the vehicle"""
        for ticket in self.get_active():
            if ticket.vehicle_number == vehicle_number:
                return ticket
        return None

    def find_by_slot(self, level: int, slot_id: int) -> Optional[Ticket]:
        """Active ticket for the slot"""
        for ticket in self.get_active():
            if ticket.level == level and ticket.slot_id == slot_id:
                return ticket
        return None
