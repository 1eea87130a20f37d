# File: src/parking_lot_system/domain/aggregates.py
"""
Aggregate Root for the Parking Lot System
Following Domain-Driven Design (DDD) Aggregate Pattern

The ParkingLot owns its floors and, through them, every slot.
All slot occupancy changes go through ParkingLot.park / ParkingLot.unpark,
which mint tickets and raise domain events.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
import logging

from .models import (
    DomainEvent, IdGenerator, InvalidSlotError, InvalidTicketError,
    OccupiedSlot, ParkingFloor, ParkingSlot, SlotType, Ticket, Vehicle,
    VehicleParkedEvent, VehicleUnparkedEvent
)


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot:
    """
    Base class for all aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self):
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    @property
    def has_changes(self) -> bool:
        return len(self._changes) > 0


# ============================================================================
# PARKING LOT AGGREGATE
# ============================================================================

class ParkingLot(AggregateRoot):
    """
    Aggregate Root: floors keyed by level, with park/unpark over the whole lot

    Slot selection is not done here; callers pass an already-selected slot
    (see domain.strategies).
    """

    def __init__(self, name: str = "Parking Lot", ticket_ids: Optional[IdGenerator] = None):
        super().__init__()
        self.name = name
        self._floors: Dict[int, ParkingFloor] = {}
        self._ticket_ids = ticket_ids or IdGenerator()

        self._logger.info(f"Created ParkingLot: {self.name}")

    # ========================================================================
    # SETUP
    # ========================================================================

    def add_floor(self, floor: ParkingFloor) -> None:
        """
        Add a floor to the lot
        Raises: ValueError if a floor with the same level already exists
        """
        if floor.level in self._floors:
            raise ValueError(f"Level {floor.level} already exists in {self.name}")

        self._floors[floor.level] = floor
        self._increment_version()
        self._logger.debug(f"Added level {floor.level} with {len(floor)} slots")

    @property
    def floors(self) -> Mapping[int, ParkingFloor]:
        """Read-only view of level -> floor"""
        return MappingProxyType(self._floors)

    def get_floor(self, level: int) -> Optional[ParkingFloor]:
        return self._floors.get(level)

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    def park(self, vehicle: Vehicle, slot: ParkingSlot) -> Ticket:
        """
        Park a vehicle in an already-selected slot and mint its ticket
        Raises: InvalidSlotError if the slot is not part of this lot,
                SlotOccupiedError / SlotTypeMismatchError from the slot
        """
        if self._lookup_slot(slot.level, slot.id) is not slot:
            raise InvalidSlotError(f"Slot {slot.id} on level {slot.level} is not part of {self.name}")

        slot.park(vehicle)

        ticket = Ticket(
            ticket_id=self._ticket_ids.next_id(),
            slot_id=slot.id,
            vehicle_number=vehicle.number,
            price=slot.slot_type.base_price,
            level=slot.level,
            slot_type=slot.slot_type,
        )

        self._increment_version()
        self._add_domain_event(VehicleParkedEvent(ticket))

        self._logger.info(
            f"Vehicle no. {vehicle.number} parked in slot {slot.id} on level {slot.level} "
            f"(Ticket: {ticket.ticket_id}, Price: {ticket.price})"
        )
        return ticket

    def unpark(self, ticket: Ticket) -> Optional[Vehicle]:
        """
        Free the slot referenced by the ticket
        Returns: the vehicle that left, None if the slot was already free
        Raises: InvalidTicketError if the floor or slot does not exist, or
                the slot now holds a different vehicle
        """
        floor = self._floors.get(ticket.level)
        if floor is None:
            raise InvalidTicketError(f"Invalid ticket {ticket.ticket_id}: no level {ticket.level}")

        slot = floor.get_slot(ticket.slot_id)
        if slot is None:
            raise InvalidTicketError(
                f"Invalid ticket {ticket.ticket_id}: no slot {ticket.slot_id} on level {ticket.level}"
            )

        if slot.occupant is not None and slot.occupant.number != ticket.vehicle_number:
            raise InvalidTicketError(
                f"Invalid ticket {ticket.ticket_id}: slot {slot.id} holds vehicle no. "
                f"{slot.occupant.number}, not {ticket.vehicle_number}"
            )

        vehicle = slot.unpark()
        if vehicle is None:
            self._logger.warning(f"Slot {slot.id} on level {slot.level} is already free")
            return None

        self._increment_version()
        self._add_domain_event(
            VehicleUnparkedEvent(vehicle, slot_id=slot.id, level=slot.level, ticket_id=ticket.ticket_id)
        )

        self._logger.info(f"Vehicle no. {vehicle.number} left slot {slot.id} on level {slot.level}")
        return vehicle

    # ========================================================================
    # QUERY METHODS (Read-only)
    # ========================================================================

    def iter_slots(self) -> List[ParkingSlot]:
        """All slots ordered by level, then slot id"""
        return [slot for level in sorted(self._floors) for slot in self._floors[level]]

    def list_occupied_slots(self) -> List[OccupiedSlot]:
        """(vehicle_number, slot_id, level) for every occupied slot"""
        return [
            OccupiedSlot(vehicle_number=slot.occupant.number, slot_id=slot.id, level=slot.level)
            for slot in self.iter_slots()
            if slot.occupant is not None
        ]

    def find_vehicle(self, vehicle_number: int) -> Optional[ParkingSlot]:
        """Get the slot holding the given vehicle number"""
        for slot in self.iter_slots():
            if slot.occupant is not None and slot.occupant.number == vehicle_number:
                return slot
        return None

    @property
    def total_slots(self) -> int:
        return sum(len(floor) for floor in self._floors.values())

    def available_count(self, slot_type: Optional[SlotType] = None) -> int:
        """Number of free slots, optionally of one type"""
        return sum(
            1 for slot in self.iter_slots()
            if slot.is_available and (slot_type is None or slot.slot_type == slot_type)
        )

    def get_occupancy_rate(self) -> float:
        """Calculate occupancy rate (0-100)"""
        if self.total_slots == 0:
            return 0.0
        return (self.total_slots - self.available_count()) / self.total_slots * 100.0

    # ========================================================================
    # INTERNAL HELPER METHODS
    # ========================================================================

    def _lookup_slot(self, level: int, slot_id: int) -> Optional[ParkingSlot]:
        floor = self._floors.get(level)
        if floor is None:
            return None
        return floor.get_slot(slot_id)

    def __repr__(self) -> str:
        return f"ParkingLot(name={self.name!r}, levels={sorted(self._floors)})"
