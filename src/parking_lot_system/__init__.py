# File: src/parking_lot_system/__init__.py
"""
Parking Lot System

In-memory parking lot: vehicles, slots on floors, tickets and pluggable
slot allocation strategies.
"""

__version__ = "1.0.0"
