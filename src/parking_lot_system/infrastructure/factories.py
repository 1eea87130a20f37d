# File: src/parking_lot_system/infrastructure/factories.py
"""
Factory Pattern Implementation for the Parking Lot System

This module builds a fully populated ParkingLot from a layout:
1. ParkingSlotFactory - slots with ids from one shared IdGenerator
2. ParkingLotFactory - floors and lots from a LotLayoutDTO, a plain dict
   or a YAML file

Slot ids are unique across the whole lot, assigned in layout order
(level by level, left to right).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union
import logging

import yaml
from pydantic import ValidationError

from ..application.dtos import LotLayoutDTO
from ..config import AppConfig
from ..domain.aggregates import ParkingLot
from ..domain.models import IdGenerator, ParkingFloor, ParkingSlot, SlotType

T = TypeVar('T')


class LayoutError(Exception):
    """Lot layout could not be read or is invalid"""
    pass


# ============================================================================
# FACTORY INTERFACES
# ============================================================================

class Factory(ABC, Generic[T]):
    """Base factory interface"""

    @abstractmethod
    def create(self, **kwargs) -> T:
        """Create an instance of T"""
        pass


# ============================================================================
# DOMAIN OBJECT FACTORIES
# ============================================================================

class ParkingSlotFactory(Factory[ParkingSlot]):
    """Factory for creating ParkingSlot entities"""

    def __init__(self, slot_ids: Optional[IdGenerator] = None):
        self.slot_ids = slot_ids or IdGenerator()

    def create(self, level: int, slot_type: Union[SlotType, str]) -> ParkingSlot:
        """
        Create a slot with the next free id

        Args:
            level: Floor level the slot belongs to
            slot_type: SlotType or its string value
        """
        if isinstance(slot_type, str):
            try:
                slot_type = SlotType(slot_type.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid slot type: {slot_type}")

        return ParkingSlot(id=self.slot_ids.next_id(), level=level, slot_type=slot_type)

    def create_many(self, level: int, slot_types: Iterable[Union[SlotType, str]]) -> List[ParkingSlot]:
        """Create one slot per entry, in order"""
        return [self.create(level=level, slot_type=slot_type) for slot_type in slot_types]


class ParkingLotFactory(Factory[ParkingLot]):
    """Factory for creating ParkingLot aggregates"""

    def __init__(self, parking_slot_factory: Optional[ParkingSlotFactory] = None):
        self.parking_slot_factory = parking_slot_factory or ParkingSlotFactory()
        self.logger = logging.getLogger(self.__class__.__name__)

    def create_floor(self, level: int, slot_types: Iterable[Union[SlotType, str]]) -> ParkingFloor:
        """Create a floor holding one new slot per entry in slot_types"""
        floor = ParkingFloor(level)
        for slot in self.parking_slot_factory.create_many(level, slot_types):
            floor.add_slot(slot)
        return floor

    def create(self, name: str = "Parking Lot", floors: Optional[Dict[int, List[Any]]] = None) -> ParkingLot:
        """
        Create a ParkingLot

        Args:
            name: Lot name
            floors: level -> slot types on that level
        """
        lot = ParkingLot(name=name)
        for level in sorted(floors or {}):
            lot.add_floor(self.create_floor(level, floors[level]))

        self.logger.info(f"Built {lot.name}: {len(lot.floors)} levels, {lot.total_slots} slots")
        return lot

    def create_from_dto(self, dto: LotLayoutDTO) -> ParkingLot:
        """Create parking lot from a validated layout"""
        return self.create(
            name=dto.name,
            floors={floor.level: list(floor.slots) for floor in dto.floors},
        )

    def create_from_dict(self, data: Dict[str, Any]) -> ParkingLot:
        """
        Create parking lot from a raw layout mapping
        Raises: LayoutError if the mapping is not a valid layout
        """
        try:
            dto = LotLayoutDTO.model_validate(data)
        except ValidationError as e:
            raise LayoutError(f"Invalid lot layout: {e}") from e
        return self.create_from_dto(dto)

    def create_demo_lot(self) -> ParkingLot:
        """Two levels: (Bike, Car) and (Car, Bike)"""
        return self.create_from_dict(AppConfig.DEMO_LAYOUT)

    def load_layout(self, path: Union[str, Path]) -> ParkingLot:
        """
        Create parking lot from a YAML layout file

        Example file:
            name: Downtown
            floors:
              - level: 1
                slots: [bike, car, car]

        Raises: LayoutError if the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise LayoutError(f"Cannot read layout file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise LayoutError(f"Cannot parse layout file {path}: {e}") from e

        if not isinstance(data, dict):
            raise LayoutError(f"Layout file {path} must contain a mapping")

        self.logger.debug(f"Loaded layout from {path}")
        return self.create_from_dict(data)
