# File: src/parking_lot_system/domain/models.py
"""
Domain Models for the Parking Lot System

This module contains:
1. Domain errors raised by slots, floors and the lot
2. Enums for vehicle, slot and strategy types
3. Value Objects: Vehicle, Ticket, OccupiedSlot
4. Entities: ParkingSlot, ParkingFloor
5. Domain Events raised by the ParkingLot aggregate

Slots and floors are created once at startup and never removed.
A slot is available exactly when it has no occupant.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional
import itertools
import logging
import uuid


# ============================================================================
# DOMAIN ERRORS
# ============================================================================

class ParkingLotError(Exception):
    """Base exception for all parking lot domain errors"""
    pass


class NoFreeSlotError(ParkingLotError):
    """No free slot of the requested type exists anywhere in the lot"""

    def __init__(self, slot_type: 'SlotType'):
        super().__init__(f"No free {slot_type} slot available")
        self.slot_type = slot_type


class InvalidTicketError(ParkingLotError):
    """Ticket references a floor or slot that does not exist, or was already used"""
    pass


class StrategyNotImplementedError(ParkingLotError, NotImplementedError):
    """Strategy type is declared but has no implementation"""

    def __init__(self, strategy_type: 'ParkingStrategyType'):
        super().__init__(f"Parking strategy '{strategy_type.value}' is not implemented")
        self.strategy_type = strategy_type


class NoVehicleError(ParkingLotError):
    """Slot was queried for its occupant while empty"""

    def __init__(self, slot_id: int):
        super().__init__(f"No vehicle in the parking slot with id: {slot_id}")
        self.slot_id = slot_id


class SlotOccupiedError(ParkingLotError):
    """Vehicle was parked into a slot that already holds another vehicle"""
    pass


class SlotTypeMismatchError(ParkingLotError):
    """Vehicle requires a different slot type than the one offered"""
    pass


class InvalidSlotError(ParkingLotError):
    """Slot does not belong to the parking lot"""
    pass


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class SlotType(Enum):
    """
    Enumeration of parking slot types
    Declaration order is the slot ordinal used by the flat pricing table
    """
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"

    @property
    def ordinal(self) -> int:
        """Position of this member in declaration order (0-based)"""
        return list(SlotType).index(self)

    @property
    def base_price(self) -> int:
        """Flat ticket price: (ordinal + 1) x 10"""
        return (self.ordinal + 1) * 10

    def __str__(self) -> str:
        return self.value.title()


class VehicleType(Enum):
    """
    Enumeration of vehicle types
    Each type is fixed to exactly one required slot type
    """
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"

    @property
    def required_slot_type(self) -> SlotType:
        """Get the slot type this vehicle type must park in"""
        return _REQUIRED_SLOT_TYPES[self]

    def __str__(self) -> str:
        return self.value.title()


_REQUIRED_SLOT_TYPES: Dict[VehicleType, SlotType] = {
    VehicleType.CAR: SlotType.CAR,
    VehicleType.BIKE: SlotType.BIKE,
    VehicleType.TRUCK: SlotType.TRUCK,
}


class ParkingStrategyType(Enum):
    """Enumeration of slot allocation policies"""
    CLOSEST_AVAILABLE = "closest_available"
    RANDOM_AVAILABLE = "random_available"


# ============================================================================
# ID GENERATION
# ============================================================================

class IdGenerator:
    """
    Monotonic integer id source
    Each owner (lot factory, parking lot) holds its own instance
    """

    def __init__(self, start: int = 1):
        if start < 0:
            raise ValueError("Id generator start cannot be negative")
        self._counter: Iterator[int] = itertools.count(start)
        self._last: Optional[int] = None

    def next_id(self) -> int:
        self._last = next(self._counter)
        return self._last

    @property
    def last_issued(self) -> Optional[int]:
        return self._last


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)
class Vehicle:
    """
    Value Object: a vehicle identified by its number
    Immutable once created
    """
    number: int
    vehicle_type: VehicleType

    def __post_init__(self):
        """Validate vehicle after initialization"""
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise ValueError(f"Vehicle number must be an integer, got: {self.number!r}")

        if self.number < 0:
            raise ValueError(f"Vehicle number cannot be negative: {self.number}")

        if not isinstance(self.vehicle_type, VehicleType):
            raise ValueError(f"Invalid vehicle type: {self.vehicle_type!r}")

    @property
    def required_slot_type(self) -> SlotType:
        return self.vehicle_type.required_slot_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "number": self.number,
            "vehicle_type": self.vehicle_type.value,
            "required_slot_type": self.required_slot_type.value,
        }

    def __str__(self) -> str:
        return f"{self.vehicle_type} #{self.number}"


@dataclass(frozen=True)
class Ticket:
    """
    Value Object: proof of parking minted at park time
    Carries everything needed to find and free the slot at unpark time
    """
    ticket_id: int
    slot_id: int
    vehicle_number: int
    price: int
    level: int
    slot_type: SlotType

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "ticket_id": self.ticket_id,
            "slot_id": self.slot_id,
            "vehicle_number": self.vehicle_number,
            "price": self.price,
            "level": self.level,
            "slot_type": self.slot_type.value,
        }


@dataclass(frozen=True)
class OccupiedSlot:
    """Value Object: reporting row for one occupied slot"""
    vehicle_number: int
    slot_id: int
    level: int


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for domain entities with an integer identity
    """

    def __init__(self, id: int):
        self._id = id

    @property
    def id(self) -> int:
        return self._id

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID and type"""
        if not isinstance(other, Entity):
            return False
        return self.id == other.id and type(self) == type(other)

    def __hash__(self) -> int:
        return hash((self.id, type(self).__name__))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class ParkingSlot(Entity):
    """
    Entity: a single parking space on one level
    Mutated only by park/unpark
    """

    def __init__(self, id: int, level: int, slot_type: SlotType):
        super().__init__(id)
        self.level = level
        self.slot_type = slot_type
        self._occupant: Optional[Vehicle] = None

    @property
    def is_available(self) -> bool:
        return self._occupant is None

    @property
    def occupant(self) -> Optional[Vehicle]:
        return self._occupant

    def get_occupant(self) -> Vehicle:
        """
        Get the parked vehicle
        Raises: NoVehicleError if the slot is empty
        """
        if self._occupant is None:
            raise NoVehicleError(self.id)
        return self._occupant

    def park(self, vehicle: Vehicle) -> None:
        """
        Occupy the slot with a vehicle
        Raises: SlotTypeMismatchError, SlotOccupiedError
        """
        if vehicle.required_slot_type != self.slot_type:
            raise SlotTypeMismatchError(
                f"{vehicle} needs a {vehicle.required_slot_type} slot, "
                f"slot {self.id} is a {self.slot_type} slot"
            )

        if self._occupant is not None:
            raise SlotOccupiedError(
                f"Slot {self.id} is already occupied by vehicle no. {self._occupant.number}"
            )

        self._occupant = vehicle

    def unpark(self) -> Optional[Vehicle]:
        """
        Vacate the slot
        Returns: the vehicle that was parked, None if the slot was already free
        """
        vehicle = self._occupant
        self._occupant = None
        return vehicle

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "slot_type": self.slot_type.value,
            "is_available": self.is_available,
            "vehicle_number": self._occupant.number if self._occupant else None,
        }

    def __str__(self) -> str:
        status = "Available" if self.is_available else f"Occupied by {self._occupant}"
        return f"Slot {self.id} (level {self.level}, {self.slot_type}) - {status}"


class ParkingFloor:
    """
    Entity: the slots of one level, keyed by slot id
    """

    def __init__(self, level: int):
        self.level = level
        self._slots: Dict[int, ParkingSlot] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def add_slot(self, slot: ParkingSlot) -> None:
        """
        Add a slot to this floor
        Raises: ValueError on a level mismatch or a duplicate slot id
        """
        if slot.level != self.level:
            raise ValueError(
                f"Slot {slot.id} is on level {slot.level}, cannot add it to level {self.level}"
            )

        if slot.id in self._slots:
            raise ValueError(f"Slot {slot.id} already exists on level {self.level}")

        self._slots[slot.id] = slot
        self._logger.debug(f"Added slot {slot.id} ({slot.slot_type}) to level {self.level}")

    def get_slot(self, slot_id: int) -> Optional[ParkingSlot]:
        return self._slots.get(slot_id)

    def get_free_slot(self, slot_type: SlotType) -> Optional[ParkingSlot]:
        """First free slot of the given type in ascending slot id order"""
        for slot_id in sorted(self._slots):
            slot = self._slots[slot_id]
            if slot.is_available and slot.slot_type == slot_type:
                return slot
        return None

    def all_slots(self) -> Mapping[int, ParkingSlot]:
        """Read-only view of slot id -> slot"""
        return MappingProxyType(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[ParkingSlot]:
        return (self._slots[slot_id] for slot_id in sorted(self._slots))

    def __repr__(self) -> str:
        return f"ParkingFloor(level={self.level}, slots={len(self._slots)})"


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    event_type: str = "domain.event"

    def __init__(self):
        self.event_id = str(uuid.uuid4())
        self.timestamp = datetime.now()

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.timestamp}"


class VehicleParkedEvent(DomainEvent):
    """Event raised when a vehicle is parked"""

    event_type = "vehicle.parked"

    def __init__(self, ticket: Ticket):
        super().__init__()
        self.ticket = ticket

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.ticket.to_dict(),
        }


class VehicleUnparkedEvent(DomainEvent):
    """Event raised when a vehicle leaves its slot"""

    event_type = "vehicle.unparked"

    def __init__(self, vehicle: Vehicle, slot_id: int, level: int, ticket_id: int):
        super().__init__()
        self.vehicle = vehicle
        self.slot_id = slot_id
        self.level = level
        self.ticket_id = ticket_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "data": {
                "vehicle_number": self.vehicle.number,
                "vehicle_type": self.vehicle.vehicle_type.value,
                "slot_id": self.slot_id,
                "level": self.level,
                "ticket_id": self.ticket_id,
            },
        }


# ============================================================================
# FACTORIES
# ============================================================================

class VehicleFactory:
    """
    Factory for creating Vehicle instances from loose input
    """

    @staticmethod
    def create_vehicle(number: int, vehicle_type: Any) -> Vehicle:
        """
        Create a Vehicle from a number and a VehicleType or its string value
        Raises: ValueError for an unknown vehicle type
        """
        if isinstance(vehicle_type, str):
            try:
                vehicle_type = VehicleType(vehicle_type.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid vehicle type: {vehicle_type}")

        return Vehicle(number=number, vehicle_type=vehicle_type)
