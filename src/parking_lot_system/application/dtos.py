# File: src/parking_lot_system/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Lot System

This module defines DTOs for data transfer between layers:
1. Input DTOs - park requests coming from commands or the CLI
2. Output DTOs - tickets, parked vehicles and lot status for reporting
3. Layout DTOs - validated lot layouts loaded from configuration

DTO Principles:
- Validation at creation
- No business logic, only data
- Serialization/deserialization support
"""

from enum import Enum
from typing import Any, Dict, List, Optional
import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import OccupiedSlot, Ticket


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseDTO':
        """Create DTO from dictionary"""
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        """Create DTO from JSON string"""
        data = json.loads(json_str)
        return cls(**data)


# ============================================================================
# ENUM DTOs
# ============================================================================

class VehicleTypeDTO(str, Enum):
    """Vehicle type DTO"""
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"


class SlotTypeDTO(str, Enum):
    """Parking slot type DTO"""
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"


class ParkingStrategyTypeDTO(str, Enum):
    """Parking strategy type DTO"""
    CLOSEST_AVAILABLE = "closest_available"
    RANDOM_AVAILABLE = "random_available"


# ============================================================================
# PARKING OPERATION DTOs
# ============================================================================

class ParkRequestDTO(BaseDTO):
    """DTO for a park request"""
    vehicle_number: int = Field(ge=0, description="Vehicle number")
    vehicle_type: VehicleTypeDTO = Field(description="Vehicle type")
    strategy: ParkingStrategyTypeDTO = Field(
        default=ParkingStrategyTypeDTO.CLOSEST_AVAILABLE,
        description="Slot allocation strategy"
    )


class TicketDTO(BaseDTO):
    """DTO for an issued ticket"""
    ticket_id: int = Field(description="Ticket number")
    slot_id: int = Field(description="Allocated slot id")
    vehicle_number: int = Field(description="Vehicle number")
    price: int = Field(ge=0, description="Flat ticket price")
    level: int = Field(description="Floor level of the slot")
    slot_type: SlotTypeDTO = Field(description="Slot type")

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> 'TicketDTO':
        return cls(**ticket.to_dict())


class ParkedVehicleDTO(BaseDTO):
    """DTO for one occupied slot"""
    vehicle_number: int
    slot_id: int
    level: int
    ticket_id: Optional[int] = Field(default=None, description="Active ticket for the vehicle, if any")

    @classmethod
    def from_occupied_slot(cls, occupied: OccupiedSlot, ticket_id: Optional[int] = None) -> 'ParkedVehicleDTO':
        return cls(
            vehicle_number=occupied.vehicle_number,
            slot_id=occupied.slot_id,
            level=occupied.level,
            ticket_id=ticket_id,
        )


class LotStatusDTO(BaseDTO):
    """DTO for lot occupancy status"""
    name: str
    total_slots: int = Field(ge=0)
    available_slots: int = Field(ge=0)
    occupied_slots: int = Field(ge=0)
    occupancy_rate: float = Field(ge=0, le=100, description="Occupied share in percent")
    available_by_type: Dict[str, int] = Field(default_factory=dict)
    active_tickets: int = Field(ge=0)


# ============================================================================
# LAYOUT DTOs
# ============================================================================

class FloorLayoutDTO(BaseDTO):
    """DTO for one floor of a lot layout; slots are listed in id order"""
    level: int = Field(description="Floor level; negative for basements")
    slots: List[SlotTypeDTO] = Field(default_factory=list, description="Slot types on this floor")


class LotLayoutDTO(BaseDTO):
    """DTO for a complete lot layout"""
    name: str = Field(default="Parking Lot", min_length=1)
    floors: List[FloorLayoutDTO] = Field(min_length=1)

    @field_validator('floors')
    @classmethod
    def validate_unique_levels(cls, v):
        """Validate that every level appears once"""
        levels = [floor.level for floor in v]
        duplicates = sorted({level for level in levels if levels.count(level) > 1})
        if duplicates:
            raise ValueError(f"Duplicate floor levels: {duplicates}")
        return v
