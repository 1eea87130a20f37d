# File: src/parking_lot_system/application/commands.py
"""
Command Pattern Implementation for the Parking Lot System

This module wraps parking operations as first-class objects. Each command
represents a business operation that can be validated, executed, logged
and, where it makes sense, undone.

Command Types:
1. ParkVehicleCommand - vehicle entry; undone by unparking its ticket
2. UnparkVehicleCommand - vehicle exit by ticket number

Every execute/undo call returns a result dictionary with "success" and
"command_id", plus "data" on success or "error" on failure.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

from pydantic import ValidationError

from ..domain.models import ParkingLotError, VehicleType
from .dtos import ParkRequestDTO, TicketDTO
from .parking_service import ParkingService, ParkingServiceError

# Failures a command reports in its result instead of raising
EXPECTED_ERRORS = (ParkingServiceError, ParkingLotError, ValueError)


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents an intent to change the system state.
    Commands are named in the imperative (e.g., ParkVehicleCommand).
    """

    def __init__(self, command_id: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.logger = logging.getLogger(self.__class__.__name__)

        self.metadata = {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "created_at": datetime.now().isoformat()
        }

    @abstractmethod
    def execute(self, service: ParkingService) -> Dict[str, Any]:
        """
        Execute the command using the provided service

        Returns: Execution result dictionary
        """
        pass

    @abstractmethod
    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate command parameters before execution

        Returns: (is_valid, error_messages)
        """
        pass

    def can_undo(self) -> bool:
        return False

    def undo(self, service: ParkingService) -> Dict[str, Any]:
        """
        Undo the effects of this command

        Returns: Undo result dictionary
        """
        return self._failure(f"{self.__class__.__name__} does not support undo")

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert command to dictionary for serialization"""
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "metadata": self.metadata,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
        }

    def _success(self, data: Any, message: str) -> Dict[str, Any]:
        return {
            "success": True,
            "command_id": self.command_id,
            "data": data,
            "message": message
        }

    def _failure(self, error: str) -> Dict[str, Any]:
        return {
            "success": False,
            "command_id": self.command_id,
            "error": error
        }


# ============================================================================
# PARKING COMMANDS
# ============================================================================

class ParkVehicleCommand(Command):
    """
    Command: Park a vehicle

    Business Operation: Vehicle Entry and Slot Allocation
    Can be undone by: unparking the issued ticket
    """

    def __init__(self, request: ParkRequestDTO, command_id: Optional[str] = None):
        super().__init__(command_id)
        self.request = request
        self.result: Optional[TicketDTO] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParkVehicleCommand':
        """Create the command from a raw request mapping"""
        return cls(ParkRequestDTO.from_dict(data))

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        """Execute vehicle parking"""
        self.logger.info(f"Executing ParkVehicleCommand for vehicle no. {self.request.vehicle_number}")

        is_valid, errors = self.validate()
        if not is_valid:
            return self._failure(f"Validation failed: {errors}")

        try:
            self.result = service.park_request(self.request)
        except EXPECTED_ERRORS as e:
            self.logger.warning(f"ParkVehicleCommand failed: {e}")
            return self._failure(str(e))

        self.executed_at = datetime.now()
        return self._success(self.result.to_dict(), "Vehicle parked successfully")

    def validate(self) -> Tuple[bool, List[str]]:
        """Validate parking request"""
        errors = []

        if self.request.vehicle_number < 0:
            errors.append("Vehicle number cannot be negative")

        try:
            VehicleType(self.request.vehicle_type)
        except ValueError:
            errors.append(f"Invalid vehicle type: {self.request.vehicle_type}")

        return len(errors) == 0, errors

    def can_undo(self) -> bool:
        """This command can be undone by unparking the vehicle"""
        return self.result is not None

    def undo(self, service: ParkingService) -> Dict[str, Any]:
        """Undo parking by unparking the issued ticket"""
        if not self.can_undo():
            return self._failure("Cannot undo: Command was not successfully executed")

        ticket_id = self.result.ticket_id
        try:
            vehicle = service.unpark_by_id(ticket_id)
        except EXPECTED_ERRORS as e:
            self.logger.warning(f"Undo of ParkVehicleCommand failed: {e}")
            return self._failure(f"Failed to unpark vehicle: {e}")

        self.result = None
        return self._success(
            {"ticket_id": ticket_id, "vehicle": vehicle.to_dict() if vehicle else None},
            "Parking undone successfully"
        )

    def get_description(self) -> str:
        return f"Park {self.request.vehicle_type} no. {self.request.vehicle_number}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["request"] = self.request.to_dict()
        data["result"] = self.result.to_dict() if self.result else None
        return data


class UnparkVehicleCommand(Command):
    """
    Command: Unpark a vehicle

    Business Operation: Vehicle Exit by ticket number
    """

    def __init__(self, ticket_id: int, command_id: Optional[str] = None):
        super().__init__(command_id)
        self.ticket_id = ticket_id

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        """Execute vehicle exit"""
        self.logger.info(f"Executing UnparkVehicleCommand for ticket {self.ticket_id}")

        is_valid, errors = self.validate()
        if not is_valid:
            return self._failure(f"Validation failed: {errors}")

        try:
            vehicle = service.unpark_by_id(self.ticket_id)
        except EXPECTED_ERRORS as e:
            self.logger.warning(f"UnparkVehicleCommand failed: {e}")
            return self._failure(str(e))

        self.executed_at = datetime.now()
        return self._success(
            {"ticket_id": self.ticket_id, "vehicle": vehicle.to_dict() if vehicle else None},
            "Vehicle unparked successfully"
        )

    def validate(self) -> Tuple[bool, List[str]]:
        errors = []
        if isinstance(self.ticket_id, bool) or not isinstance(self.ticket_id, int):
            errors.append(f"Ticket id must be an integer, got: {self.ticket_id!r}")
        elif self.ticket_id < 1:
            errors.append("Ticket id must be positive")
        return len(errors) == 0, errors

    def get_description(self) -> str:
        return f"Unpark ticket {self.ticket_id}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["ticket_id"] = self.ticket_id
        return data


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes commands with features like:
    - Command logging
    - Bounded history
    - Undo/redo support
    """

    def __init__(self, service: ParkingService, max_history_size: int = 1000):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)

        self.command_history: List[Command] = []
        self.undone_commands: List[Command] = []
        self.max_history_size = max_history_size

    def process(self, command: Command) -> Dict[str, Any]:
        """
        Process a command

        Args:
            command: Command to execute

        Returns: Execution result
        """
        self.logger.info(f"Processing command: {command.get_description()}")

        result = command.execute(self.service)
        if result.get("success", False):
            self._add_to_history(command)
            self.undone_commands.clear()
        else:
            self.logger.warning(f"Command {command.get_description()} failed: {result.get('error')}")

        return result

    def process_batch(self, commands: List[Command], stop_on_failure: bool = False) -> List[Dict[str, Any]]:
        """Process multiple commands in order"""
        results = []

        for command in commands:
            result = self.process(command)
            results.append(result)

            if stop_on_failure and not result.get("success", False):
                break

        return results

    def process_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Build a ParkVehicleCommand from raw input and process it"""
        try:
            command = ParkVehicleCommand.from_dict(data)
        except ValidationError as e:
            self.logger.warning(f"Rejected park request {data}: {e}")
            return {"success": False, "command_id": None, "error": str(e)}
        return self.process(command)

    def undo_last(self) -> Dict[str, Any]:
        """Undo the last executed command"""
        if not self.command_history:
            return {
                "success": False,
                "error": "No commands to undo"
            }

        command = self.command_history[-1]
        if not command.can_undo():
            return {
                "success": False,
                "command_id": command.command_id,
                "error": f"Command {command.get_description()} does not support undo"
            }

        result = command.undo(self.service)
        if result.get("success", False):
            self.command_history.pop()
            self.undone_commands.append(command)

        return result

    def redo_last(self) -> Dict[str, Any]:
        """Redo the last undone command"""
        if not self.undone_commands:
            return {
                "success": False,
                "error": "No commands to redo"
            }

        command = self.undone_commands.pop()
        result = command.execute(self.service)

        if result.get("success", False):
            self._add_to_history(command)
        else:
            self.undone_commands.append(command)

        return result

    def get_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get command history"""
        history = self.command_history.copy()
        if limit:
            history = history[-limit:]

        return [cmd.to_dict() for cmd in history]

    def clear_history(self) -> None:
        """Clear command history"""
        self.command_history.clear()
        self.undone_commands.clear()

    def _add_to_history(self, command: Command) -> None:
        self.command_history.append(command)
        if len(self.command_history) > self.max_history_size:
            self.command_history.pop(0)
