# File: src/parking_lot_system/config.py
"""
Application configuration constants
"""

import logging


class AppConfig:
    """Static settings for the parking lot application"""

    APP_NAME = "Parking Lot System"
    VERSION = "1.0.0"

    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_LEVEL = logging.INFO

    DEFAULT_STRATEGY = "closest_available"

    # Level 1: Bike, Car / Level 2: Car, Bike
    DEMO_LAYOUT = {
        "name": "Demo Parking Lot",
        "floors": [
            {"level": 1, "slots": ["bike", "car"]},
            {"level": 2, "slots": ["car", "bike"]},
        ],
    }

    # (vehicle number, vehicle type) pairs driven through the demo
    DEMO_FIRST_VEHICLE = (123, "car")
    DEMO_SECOND_VEHICLE = (456, "bike")
