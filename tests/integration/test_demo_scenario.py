# File: tests/integration/test_demo_scenario.py
"""
End-to-End Scenario Tests

Drive the full stack (factory -> service -> lot -> repository -> bus -> console)
through the demo scenario and a few business-critical paths.
"""

import io
import unittest

from parking_lot_system.application.commands import (
    CommandProcessor, ParkVehicleCommand, UnparkVehicleCommand
)
from parking_lot_system.application.dtos import ParkRequestDTO
from parking_lot_system.application.parking_service import (
    ParkingLotFullError, ParkingService
)
from parking_lot_system.domain.models import (
    InvalidTicketError, NoFreeSlotError, OccupiedSlot, Vehicle, VehicleType
)
from parking_lot_system.infrastructure.factories import ParkingLotFactory
from parking_lot_system.infrastructure.messaging import ALL_EVENTS, EventBus, RecordingEventHandler
from parking_lot_system.presentation.console import (
    show_all_parked_vehicles, show_all_tickets, show_status
)


class TestDemoScenario(unittest.TestCase):
    """Park car 123, unpark it, park bike 456"""

    def setUp(self):
        self.lot = ParkingLotFactory().create_demo_lot()
        self.bus = EventBus()
        self.recorder = RecordingEventHandler()
        self.bus.subscribe(ALL_EVENTS, self.recorder)
        self.service = ParkingService(self.lot, event_bus=self.bus)

    def test_demo_through_service(self):
        car_ticket = self.service.park(Vehicle(123, VehicleType.CAR))
        self.assertEqual(car_ticket.price, 10)
        self.assertIn(car_ticket.slot_id, (2, 3))

        self.assertEqual(self.service.unpark(car_ticket).number, 123)

        bike_ticket = self.service.park(Vehicle(456, VehicleType.BIKE))
        self.assertEqual(bike_ticket.price, 20)
        self.assertIn(bike_ticket.slot_id, (1, 4))

        self.assertEqual(self.lot.list_occupied_slots(), [
            OccupiedSlot(vehicle_number=456, slot_id=bike_ticket.slot_id, level=bike_ticket.level)
        ])
        self.assertEqual(
            [event.event_type for event in self.recorder.events],
            ["vehicle.parked", "vehicle.unparked", "vehicle.parked"]
        )

    def test_demo_through_commands(self):
        processor = CommandProcessor(self.service)

        parked = processor.process(ParkVehicleCommand(ParkRequestDTO(vehicle_number=123, vehicle_type="car")))
        unparked = processor.process(UnparkVehicleCommand(parked["data"]["ticket_id"]))
        bike = processor.process(ParkVehicleCommand(ParkRequestDTO(vehicle_number=456, vehicle_type="bike")))

        self.assertTrue(all(r["success"] for r in (parked, unparked, bike)))
        self.assertEqual(len(processor.get_history()), 3)

        out = io.StringIO()
        self.assertEqual(show_all_parked_vehicles(self.service, out), 1)
        self.assertEqual(show_all_tickets(self.service, out), 2)
        self.assertEqual(out.getvalue().splitlines(), [
            "Vehicle no. 456 is parked on parking slot no. 1 on level 1",
            "Ticket no. 1|\tVehicle no. 123|\tPrice : 10|\t Slot Id: 2|",
            "Ticket no. 2|\tVehicle no. 456|\tPrice : 20|\t Slot Id: 1|",
        ])

    def test_status_line(self):
        self.service.park(Vehicle(123, VehicleType.CAR))
        out = io.StringIO()
        show_status(self.service, out)
        self.assertEqual(
            out.getvalue(),
            "Demo Parking Lot: 1/4 occupied (25.0%), free by type: car: 1, bike: 2\n"
        )


class TestCriticalScenarios(unittest.TestCase):
    """Business-critical paths across the whole stack"""

    def test_single_bike_slot_lot(self):
        lot = ParkingLotFactory().create(floors={1: ["bike"]})
        service = ParkingService(lot)

        with self.assertRaises(ParkingLotFullError) as context:
            service.park(Vehicle(1, VehicleType.CAR))
        self.assertIsInstance(context.exception.__cause__, NoFreeSlotError)

        service.park(Vehicle(2, VehicleType.BIKE))

        with self.assertRaises(ParkingLotFullError):
            service.park(Vehicle(3, VehicleType.BIKE))

    def test_double_unpark(self):
        lot = ParkingLotFactory().create_demo_lot()
        service = ParkingService(lot)
        ticket = service.park(Vehicle(123, VehicleType.CAR))

        service.unpark(ticket)
        self.assertIsNone(lot.unpark(ticket))
        with self.assertRaises(InvalidTicketError):
            service.unpark(ticket)

    def test_fill_and_drain_lot(self):
        lot = ParkingLotFactory().create(floors={1: ["car"] * 3, 2: ["car"] * 3})
        service = ParkingService(lot)

        tickets = [service.park(Vehicle(n, VehicleType.CAR)) for n in range(6)]
        self.assertEqual([t.slot_id for t in tickets], [1, 2, 3, 4, 5, 6])
        self.assertEqual(lot.get_occupancy_rate(), 100.0)

        service.unpark(tickets[1])
        self.assertEqual(service.park(Vehicle(99, VehicleType.CAR)).slot_id, 2)

        for ticket in service.list_active_tickets():
            service.unpark(ticket)
        self.assertEqual(lot.available_count(), 6)
        self.assertEqual(service.list_active_tickets(), [])
        self.assertEqual(len(service.list_tickets()), 7)

    def test_empty_reports(self):
        service = ParkingService(ParkingLotFactory().create_demo_lot())
        out = io.StringIO()
        self.assertEqual(show_all_parked_vehicles(service, out), 0)
        self.assertEqual(show_all_tickets(service, out), 0)
        self.assertEqual(out.getvalue(), "")


if __name__ == '__main__':
    unittest.main()
