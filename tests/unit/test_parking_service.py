# File: tests/unit/test_parking_service.py
"""
Application Service Unit Tests

Tests for ParkingService orchestration, error wrapping and ticket invalidation.
"""

import unittest
from unittest.mock import Mock

from parking_lot_system.application.dtos import ParkRequestDTO, TicketDTO
from parking_lot_system.application.parking_service import (
    ParkingLotFullError, ParkingService, ParkingServiceError,
    SlotAllocationError, StrategySelectionError, VehicleAlreadyParkedError
)
from parking_lot_system.domain.models import (
    InvalidTicketError, NoFreeSlotError, ParkingStrategyType,
    SlotOccupiedError, SlotType, StrategyNotImplementedError, Ticket,
    Vehicle, VehicleType
)
from parking_lot_system.domain.strategies import ParkingStrategyFactory
from parking_lot_system.infrastructure.factories import ParkingLotFactory
from parking_lot_system.infrastructure.messaging import ALL_EVENTS, EventBus, RecordingEventHandler
from parking_lot_system.infrastructure.repositories import TicketRepository


class ParkingServiceTestBase(unittest.TestCase):
    """Base class: demo lot (Bike 1, Car 2 / Car 3, Bike 4) with a recording bus"""

    def setUp(self):
        self.lot = ParkingLotFactory().create_demo_lot()
        self.tickets = TicketRepository()
        self.bus = EventBus()
        self.recorder = RecordingEventHandler()
        self.bus.subscribe(ALL_EVENTS, self.recorder)
        self.service = ParkingService(
            self.lot,
            strategy_factory=ParkingStrategyFactory(),
            ticket_repository=self.tickets,
            event_bus=self.bus
        )
        self.car = Vehicle(123, VehicleType.CAR)
        self.bike = Vehicle(456, VehicleType.BIKE)


class TestParkingServicePark(ParkingServiceTestBase):
    """Unit tests for ParkingService.park"""

    def test_park_car(self):
        ticket = self.service.park(self.car)

        self.assertEqual(ticket.price, 10)
        self.assertEqual((ticket.level, ticket.slot_id), (1, 2))
        self.assertFalse(self.lot.get_floor(1).get_slot(2).is_available)
        self.assertTrue(self.tickets.is_active(ticket))

    def test_park_bike_price(self):
        ticket = self.service.park(self.bike)
        self.assertEqual(ticket.price, 20)
        self.assertEqual(ticket.slot_id, 1)

    def test_park_publishes_event(self):
        ticket = self.service.park(self.car)
        events = self.recorder.of_type("vehicle.parked")
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].ticket, ticket)
        self.assertFalse(self.lot.has_changes)

    def test_park_with_strategy_name(self):
        ticket = self.service.park(self.car, "closest_available")
        self.assertEqual(ticket.slot_id, 2)

    def test_lot_full_for_type(self):
        self.service.park(self.car)
        self.service.park(Vehicle(124, VehicleType.CAR))

        with self.assertRaises(ParkingLotFullError) as context:
            self.service.park(Vehicle(125, VehicleType.CAR))

        self.assertIsInstance(context.exception, SlotAllocationError)
        self.assertIsInstance(context.exception.__cause__, NoFreeSlotError)

    def test_no_slot_of_type(self):
        with self.assertRaises(ParkingServiceError) as context:
            self.service.park(Vehicle(9, VehicleType.TRUCK))
        self.assertIsInstance(context.exception.__cause__, NoFreeSlotError)
        self.assertEqual(self.tickets.count(), 0)

    def test_random_strategy_not_implemented(self):
        with self.assertRaises(StrategySelectionError) as context:
            self.service.park(self.car, ParkingStrategyType.RANDOM_AVAILABLE)

        self.assertIsInstance(context.exception.__cause__, StrategyNotImplementedError)
        self.assertEqual(self.lot.available_count(), 4)

    def test_unknown_strategy(self):
        with self.assertRaises(StrategySelectionError) as context:
            self.service.park(self.car, "cheapest")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def test_vehicle_already_parked(self):
        self.service.park(self.car)
        with self.assertRaises(VehicleAlreadyParkedError):
            self.service.park(Vehicle(123, VehicleType.CAR))
        self.assertEqual(self.tickets.count(), 1)

    def test_other_domain_errors_are_wrapped(self):
        slot = self.lot.get_floor(1).get_slot(2)
        strategy = Mock()
        strategy.get_free_slot.return_value = slot
        strategy_factory = Mock()
        strategy_factory.create.return_value = strategy
        service = ParkingService(self.lot, strategy_factory=strategy_factory)

        slot.park(Vehicle(999, VehicleType.CAR))

        with self.assertRaises(ParkingServiceError) as context:
            service.park(self.car)
        self.assertIsInstance(context.exception.__cause__, SlotOccupiedError)

    def test_duplicate_ticket_id_rolls_back_park(self):
        shared = TicketRepository()
        first_lot = ParkingLotFactory().create(floors={1: ["car"]})
        second_lot = ParkingLotFactory().create(floors={1: ["car"]})
        ParkingService(first_lot, ticket_repository=shared).park(Vehicle(1, VehicleType.CAR))
        service = ParkingService(second_lot, ticket_repository=shared, event_bus=self.bus)

        with self.assertRaises(ParkingServiceError) as context:
            service.park(Vehicle(2, VehicleType.CAR))

        self.assertIsInstance(context.exception.__cause__, KeyError)
        self.assertEqual(second_lot.list_occupied_slots(), [])
        self.assertFalse(second_lot.has_changes)
        self.assertEqual(self.recorder.events, [])
        self.assertEqual(shared.get(1).vehicle_number, 1)

    def test_park_request(self):
        result = self.service.park_request(ParkRequestDTO(vehicle_number=456, vehicle_type="bike"))

        self.assertIsInstance(result, TicketDTO)
        self.assertEqual(result.price, 20)
        self.assertEqual(result.slot_type, "bike")


class TestParkingServiceUnpark(ParkingServiceTestBase):
    """Unit tests for ParkingService.unpark"""

    def setUp(self):
        super().setUp()
        self.ticket = self.service.park(self.car)

    def test_unpark_frees_slot_and_invalidates_ticket(self):
        self.assertEqual(self.service.unpark(self.ticket), self.car)

        self.assertTrue(self.lot.get_floor(1).get_slot(2).is_available)
        self.assertFalse(self.tickets.is_active(self.ticket))
        self.assertEqual(self.tickets.get(self.ticket.ticket_id), self.ticket)
        self.assertEqual(len(self.recorder.of_type("vehicle.unparked")), 1)

    def test_second_unpark_rejected(self):
        self.service.unpark(self.ticket)
        with self.assertRaises(InvalidTicketError):
            self.service.unpark(self.ticket)

    def test_used_ticket_cannot_free_new_occupant(self):
        self.service.unpark(self.ticket)
        self.service.park(Vehicle(124, VehicleType.CAR))

        with self.assertRaises(InvalidTicketError):
            self.service.unpark(self.ticket)
        self.assertEqual(self.lot.get_floor(1).get_slot(2).get_occupant().number, 124)

    def test_forged_ticket_rejected(self):
        forged = Ticket(self.ticket.ticket_id, 3, 123, 10, 2, SlotType.CAR)
        with self.assertRaises(InvalidTicketError):
            self.service.unpark(forged)
        self.assertTrue(self.tickets.is_active(self.ticket))

    def test_unpark_by_id(self):
        self.assertEqual(self.service.unpark_by_id(self.ticket.ticket_id), self.car)
        with self.assertRaises(InvalidTicketError):
            self.service.unpark_by_id(self.ticket.ticket_id)


class TestParkingServiceQueries(ParkingServiceTestBase):
    """Unit tests for ParkingService reporting"""

    def setUp(self):
        super().setUp()
        self.car_ticket = self.service.park(self.car)
        self.bike_ticket = self.service.park(self.bike)

    def test_list_parked_vehicles(self):
        parked = self.service.list_parked_vehicles()

        self.assertEqual([p.vehicle_number for p in parked], [456, 123])
        self.assertEqual(parked[0].ticket_id, self.bike_ticket.ticket_id)
        self.assertEqual((parked[1].slot_id, parked[1].level), (2, 1))

    def test_list_tickets_in_issue_order(self):
        tickets = self.service.list_tickets()
        self.assertEqual([t.ticket_id for t in tickets], [1, 2])
        self.assertEqual([t.price for t in tickets], [10, 20])

    def test_used_tickets_stay_listed(self):
        self.service.unpark(self.car_ticket)

        self.assertEqual([t.ticket_id for t in self.service.list_tickets()], [1, 2])
        self.assertEqual(self.service.list_active_tickets(), [self.bike_ticket])
        self.assertEqual(self.service.get_status().active_tickets, 1)

    def test_parked_vehicle_ignores_used_ticket_for_slot(self):
        self.service.unpark(self.car_ticket)
        new_ticket = self.service.park(Vehicle(124, VehicleType.CAR))

        parked = self.service.list_parked_vehicles()
        self.assertEqual(parked[1].vehicle_number, 124)
        self.assertEqual(parked[1].ticket_id, new_ticket.ticket_id)

    def test_get_status(self):
        status = self.service.get_status()

        self.assertEqual(status.total_slots, 4)
        self.assertEqual(status.occupied_slots, 2)
        self.assertEqual(status.available_slots, 2)
        self.assertEqual(status.occupancy_rate, 50.0)
        self.assertEqual(status.available_by_type, {"car": 1, "bike": 1})
        self.assertEqual(status.active_tickets, 2)


if __name__ == '__main__':
    unittest.main()
