# File: src/parking_lot_system/application/parking_service.py
"""
Parking Lot Application Service

This module implements the application service layer for the parking lot.
It orchestrates slot selection, the ParkingLot aggregate and the ticket
registry, and handles the use cases of the system.

Responsibilities:
1. Park a vehicle: select a slot, occupy it, register the ticket
2. Unpark a vehicle with an active ticket
3. Report parked vehicles, issued tickets and lot status
4. Forward domain events to the event bus

All collaborators are passed in by the caller; there is no global state.
The service is single-threaded and not safe for concurrent use.
"""

from typing import List, Optional, Union
import logging

from ..domain.aggregates import ParkingLot
from ..domain.models import (
    InvalidTicketError, NoFreeSlotError, ParkingLotError,
    ParkingStrategyType, SlotType, StrategyNotImplementedError, Ticket,
    Vehicle, VehicleFactory
)
from ..domain.strategies import ParkingStrategy, ParkingStrategyFactory
from ..infrastructure.messaging import EventBus
from ..infrastructure.repositories import TicketRepository
from .dtos import LotStatusDTO, ParkedVehicleDTO, ParkRequestDTO, TicketDTO


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for parking service errors; the domain error is __cause__"""
    pass


class SlotAllocationError(ParkingServiceError):
    """Exception for slot allocation errors"""
    pass


class ParkingLotFullError(SlotAllocationError):
    """Exception when no slot of the required type is free"""
    pass


class StrategySelectionError(ParkingServiceError):
    """Exception when the requested strategy cannot be used"""
    pass


class VehicleAlreadyParkedError(ParkingServiceError):
    """Exception when a vehicle number is already in the lot"""
    pass


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for the parking lot

    Use cases:
    1. Vehicle parking (park, park_request)
    2. Vehicle exit (unpark, unpark_by_id)
    3. Status reporting (list_parked_vehicles, list_tickets, get_status)
    """

    def __init__(
        self,
        parking_lot: ParkingLot,
        strategy_factory: Optional[ParkingStrategyFactory] = None,
        ticket_repository: Optional[TicketRepository] = None,
        event_bus: Optional[EventBus] = None
    ):
        """
        Initialize the parking service

        Args:
            parking_lot: The lot whose slots are managed
            strategy_factory: Builds allocation strategies (default factory if omitted)
            ticket_repository: Registry of issued tickets (empty if omitted)
            event_bus: Receives the lot's domain events, if given
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.parking_lot = parking_lot
        self.strategy_factory = strategy_factory or ParkingStrategyFactory()
        self.ticket_repository = ticket_repository if ticket_repository is not None else TicketRepository()
        self.event_bus = event_bus

        self.logger.info(f"ParkingService initialized for {parking_lot.name}")

    # ========================================================================
    # PARKING
    # ========================================================================

    def park(
        self,
        vehicle: Vehicle,
        strategy_type: Union[ParkingStrategyType, str] = ParkingStrategyType.CLOSEST_AVAILABLE
    ) -> Ticket:
        """
        Park a vehicle in the parking lot

        Use Case: Vehicle Entry
        1. Reject a vehicle number that is already parked
        2. Build the allocation strategy
        3. Select a free slot of the vehicle's required type
        4. Occupy it and register the ticket

        Raises:
            VehicleAlreadyParkedError: the vehicle number is already in the lot
            StrategySelectionError: unknown or unimplemented strategy
            ParkingLotFullError: no free slot of the required type
            ParkingServiceError: any other domain failure
        """
        self.logger.info(f"Processing parking request for {vehicle}")

        occupied = self.parking_lot.find_vehicle(vehicle.number)
        if occupied is not None:
            self.logger.warning(f"Vehicle no. {vehicle.number} is already parked in slot {occupied.id}")
            raise VehicleAlreadyParkedError(
                f"Vehicle no. {vehicle.number} is already parked in slot {occupied.id} "
                f"on level {occupied.level}"
            )

        strategy = self._get_parking_strategy(strategy_type)

        try:
            slot = strategy.get_free_slot(vehicle.required_slot_type)
            ticket = self.parking_lot.park(vehicle, slot)
        except NoFreeSlotError as e:
            self.logger.warning(f"Cannot park {vehicle}: {e}")
            raise ParkingLotFullError(f"Cannot park {vehicle}: {e}") from e
        except ParkingLotError as e:
            self.logger.error(f"Error parking {vehicle}: {e}")
            raise ParkingServiceError(f"Cannot park {vehicle}: {e}") from e

        try:
            self.ticket_repository.add(ticket)
        except KeyError as e:
            # An occupied slot must always have a registered ticket
            self.parking_lot.unpark(ticket)
            self.parking_lot.clear_events()
            self.logger.error(f"Cannot register ticket {ticket.ticket_id} for {vehicle}: {e}")
            raise ParkingServiceError(f"Cannot register ticket {ticket.ticket_id} for {vehicle}") from e

        self._publish_events()
        return ticket

    def park_request(self, request: ParkRequestDTO) -> TicketDTO:
        """Park from a request DTO and return the ticket as a DTO"""
        vehicle = VehicleFactory.create_vehicle(request.vehicle_number, request.vehicle_type)
        ticket = self.park(vehicle, request.strategy)
        return TicketDTO.from_ticket(ticket)

    # ========================================================================
    # EXIT
    # ========================================================================

    def unpark(self, ticket: Ticket) -> Optional[Vehicle]:
        """
        Free the slot referenced by an active ticket

        Use Case: Vehicle Exit
        The ticket is invalidated, so presenting it again fails.

        Returns: the vehicle that left
        Raises: InvalidTicketError for a ticket that was never issued,
                was already used, or points at a missing floor or slot
        """
        if not self.ticket_repository.is_active(ticket):
            self.logger.warning(f"Rejected unpark with inactive ticket {ticket.ticket_id}")
            raise InvalidTicketError(f"Ticket {ticket.ticket_id} is not active")

        vehicle = self.parking_lot.unpark(ticket)
        self.ticket_repository.mark_used(ticket.ticket_id)
        self._publish_events()
        return vehicle

    def unpark_by_id(self, ticket_id: int) -> Optional[Vehicle]:
        """
        Unpark using only the ticket number
        Raises: InvalidTicketError if no active ticket has that number
        """
        ticket = self.ticket_repository.get(ticket_id)
        if ticket is None:
            self.logger.warning(f"Rejected unpark with unknown ticket {ticket_id}")
            raise InvalidTicketError(f"Ticket {ticket_id} is not active")
        return self.unpark(ticket)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def list_parked_vehicles(self) -> List[ParkedVehicleDTO]:
        """One entry per occupied slot, ordered by level then slot id"""
        parked = []
        for occupied in self.parking_lot.list_occupied_slots():
            ticket = self.ticket_repository.find_by_slot(occupied.level, occupied.slot_id)
            parked.append(ParkedVehicleDTO.from_occupied_slot(
                occupied, ticket.ticket_id if ticket else None
            ))
        return parked

    def list_active_tickets(self) -> List[Ticket]:
        """Active tickets in issue order"""
        return self.ticket_repository.get_active()

    def list_tickets(self) -> List[TicketDTO]:
        """Every issued ticket in issue order, used ones included"""
        return [TicketDTO.from_ticket(ticket) for ticket in self.ticket_repository.get_all()]

    def get_status(self) -> LotStatusDTO:
        """Get occupancy summary for the lot"""
        lot = self.parking_lot
        available = lot.available_count()
        return LotStatusDTO(
            name=lot.name,
            total_slots=lot.total_slots,
            available_slots=available,
            occupied_slots=lot.total_slots - available,
            occupancy_rate=round(lot.get_occupancy_rate(), 2),
            available_by_type={
                slot_type.value: lot.available_count(slot_type)
                for slot_type in SlotType
                if any(slot.slot_type == slot_type for slot in lot.iter_slots())
            },
            active_tickets=self.ticket_repository.active_count(),
        )

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def _get_parking_strategy(self, strategy_type: Union[ParkingStrategyType, str]) -> ParkingStrategy:
        try:
            return self.strategy_factory.create(strategy_type, self.parking_lot.floors)
        except StrategyNotImplementedError as e:
            raise StrategySelectionError(str(e)) from e
        except ValueError as e:
            self.logger.warning(f"Rejected strategy {strategy_type!r}: {e}")
            raise StrategySelectionError(str(e)) from e

    def _publish_events(self) -> None:
        events = self.parking_lot.clear_events()
        if self.event_bus is not None:
            self.event_bus.publish_all(events)
