# File: src/parking_lot_system/presentation/console.py
"""
Console reporting for the Parking Lot System

Plain-text views over a ParkingService. Each function writes one line per
row to the given stream and returns the number of lines written.
"""

from typing import TextIO, Optional
import sys

from ..application.parking_service import ParkingService

PARKED_VEHICLE_FORMAT = "Vehicle no. {vehicle_number} is parked on parking slot no. {slot_id} on level {level}"
TICKET_FORMAT = "Ticket no. {ticket_id}|\tVehicle no. {vehicle_number}|\tPrice : {price}|\t Slot Id: {slot_id}|"


def show_all_parked_vehicles(service: ParkingService, stream: Optional[TextIO] = None) -> int:
    """Print every occupied slot, ordered by level then slot id"""
    stream = stream or sys.stdout
    parked = service.list_parked_vehicles()
    for vehicle in parked:
        stream.write(PARKED_VEHICLE_FORMAT.format(
            vehicle_number=vehicle.vehicle_number,
            slot_id=vehicle.slot_id,
            level=vehicle.level,
        ) + "\n")
    return len(parked)


def show_all_tickets(service: ParkingService, stream: Optional[TextIO] = None) -> int:
    """Print every issued ticket in issue order"""
    stream = stream or sys.stdout
    tickets = service.list_tickets()
    for ticket in tickets:
        stream.write(TICKET_FORMAT.format(
            ticket_id=ticket.ticket_id,
            vehicle_number=ticket.vehicle_number,
            price=ticket.price,
            slot_id=ticket.slot_id,
        ) + "\n")
    return len(tickets)


def show_status(service: ParkingService, stream: Optional[TextIO] = None) -> None:
    """Print a one-line occupancy summary"""
    stream = stream or sys.stdout
    status = service.get_status()
    free = ", ".join(f"{slot_type}: {count}" for slot_type, count in status.available_by_type.items())
    stream.write(
        f"{status.name}: {status.occupied_slots}/{status.total_slots} occupied "
        f"({status.occupancy_rate:.1f}%), free by type: {free or 'none'}\n"
    )
