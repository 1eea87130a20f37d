# File: src/parking_lot_system/domain/strategies.py
"""
Strategy Pattern Implementation for Slot Allocation

Each allocation strategy answers one question: given a required slot type
and the floors of a lot, which free slot should the vehicle get?

Strategies:
1. ClosestAvailableStrategy - lowest level first, then lowest slot id
2. RANDOM_AVAILABLE - declared in ParkingStrategyType, not implemented

The ParkingStrategyFactory turns a ParkingStrategyType into a strategy
object bound to the lot's current floor map.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Union
import logging

from .models import (
    NoFreeSlotError, ParkingFloor, ParkingLotError, ParkingSlot,
    ParkingStrategyType, SlotType, StrategyNotImplementedError
)


# ============================================================================
# STRATEGY INTERFACE
# ============================================================================

class ParkingStrategy(ABC):
    """
    Abstract base class for slot allocation strategies
    """

    def __init__(self, floors: Optional[Mapping[int, ParkingFloor]]):
        self.floors = floors
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_free_slot(self, slot_type: SlotType) -> ParkingSlot:
        """
        Select a free slot of the given type
        Raises: NoFreeSlotError if no such slot exists
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Strategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


# ============================================================================
# PARKING ALLOCATION STRATEGIES
# ============================================================================

class ClosestAvailableStrategy(ParkingStrategy):
    """
    Strategy: first free slot of the requested type
    - Floors are scanned from the lowest level up
    - Slots on a floor are scanned in ascending id order
    """

    def get_free_slot(self, slot_type: SlotType) -> ParkingSlot:
        if self.floors is None:
            raise ParkingLotError("Floor map not available")

        self.logger.debug(f"Scanning {len(self.floors)} levels for a free {slot_type} slot")

        for level in sorted(self.floors):
            slot = self.floors[level].get_free_slot(slot_type)
            if slot is not None:
                self.logger.debug(f"Selected slot {slot.id} on level {level}")
                return slot

        raise NoFreeSlotError(slot_type)


# ============================================================================
# STRATEGY FACTORY
# ============================================================================

class ParkingStrategyFactory:
    """
    Factory: builds the strategy object for a ParkingStrategyType
    """

    _IMPLEMENTATIONS = {
        ParkingStrategyType.CLOSEST_AVAILABLE: ClosestAvailableStrategy,
    }

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def resolve_type(strategy_type: Union[ParkingStrategyType, str]) -> ParkingStrategyType:
        """
        Convert a strategy type or its string value to the enum
        Raises: ValueError for an unknown strategy name
        """
        if isinstance(strategy_type, ParkingStrategyType):
            return strategy_type

        try:
            return ParkingStrategyType(str(getattr(strategy_type, "value", strategy_type)).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown parking strategy: {strategy_type}")

    def create(
        self,
        strategy_type: Union[ParkingStrategyType, str],
        floors: Optional[Mapping[int, ParkingFloor]]
    ) -> ParkingStrategy:
        """
        Create a strategy over the given floor map
        Raises: StrategyNotImplementedError for a declared but unbuilt type
        """
        strategy_type = self.resolve_type(strategy_type)

        strategy_class = self._IMPLEMENTATIONS.get(strategy_type)
        if strategy_class is None:
            self.logger.warning(f"Strategy {strategy_type.value} requested but not implemented")
            raise StrategyNotImplementedError(strategy_type)

        return strategy_class(floors)

    def available_types(self):
        """Strategy types that can actually be built"""
        return [t for t in ParkingStrategyType if t in self._IMPLEMENTATIONS]
