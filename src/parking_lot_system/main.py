# File: src/parking_lot_system/main.py
"""
Main application entry point for the Parking Lot System
Wires the components together and runs the demo scenario
"""

from typing import List, Optional
import argparse
import logging
import sys

from .application.commands import CommandProcessor, ParkVehicleCommand, UnparkVehicleCommand
from .application.dtos import ParkRequestDTO
from .application.parking_service import ParkingService
from .config import AppConfig
from .domain.strategies import ParkingStrategyFactory
from .infrastructure.factories import LayoutError, ParkingLotFactory
from .infrastructure.messaging import ALL_EVENTS, EventBus, LoggingEventHandler
from .infrastructure.repositories import TicketRepository
from .presentation.console import show_all_parked_vehicles, show_all_tickets


def setup_logging(level: int = AppConfig.LOG_LEVEL, log_file: Optional[str] = None) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=AppConfig.LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    return logging.getLogger(__name__)


class ParkingApplication:
    """Main application controller that sets up all components"""

    def __init__(self, layout_path: Optional[str] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.info(f"Starting {AppConfig.APP_NAME} {AppConfig.VERSION}...")
        self.setup_components(layout_path)

    def setup_components(self, layout_path: Optional[str] = None) -> None:
        """
        Initialize all application components with dependency injection
        Raises: LayoutError if the layout file is unusable
        """
        lot_factory = ParkingLotFactory()
        if layout_path:
            self.parking_lot = lot_factory.load_layout(layout_path)
        else:
            self.parking_lot = lot_factory.create_demo_lot()

        self.event_bus = EventBus()
        self.event_bus.subscribe(ALL_EVENTS, LoggingEventHandler())

        self.service = ParkingService(
            self.parking_lot,
            strategy_factory=ParkingStrategyFactory(),
            ticket_repository=TicketRepository(),
            event_bus=self.event_bus
        )
        self.processor = CommandProcessor(self.service)
        self.logger.info("Components initialized")

    def run_demo(self) -> List[dict]:
        """
        Park the first demo vehicle, unpark it, then park the second one
        Returns: the command results in order
        """
        number, vehicle_type = AppConfig.DEMO_FIRST_VEHICLE
        first = self.processor.process(ParkVehicleCommand(ParkRequestDTO(
            vehicle_number=number, vehicle_type=vehicle_type, strategy=AppConfig.DEFAULT_STRATEGY
        )))
        results = [first]

        if first["success"]:
            results.append(self.processor.process(UnparkVehicleCommand(first["data"]["ticket_id"])))

        number, vehicle_type = AppConfig.DEMO_SECOND_VEHICLE
        results.append(self.processor.process(ParkVehicleCommand(ParkRequestDTO(
            vehicle_number=number, vehicle_type=vehicle_type, strategy=AppConfig.DEFAULT_STRATEGY
        ))))
        return results

    def report(self, show_tickets: bool = True) -> None:
        show_all_parked_vehicles(self.service, sys.stdout)
        if show_tickets:
            show_all_tickets(self.service, sys.stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='parking-lot', description=f'{AppConfig.APP_NAME} demo')
    parser.add_argument('--layout', metavar='PATH',
                        help='YAML lot layout (default: built-in two-level demo lot)')
    parser.add_argument('--log-level', default=logging.getLevelName(AppConfig.LOG_LEVEL),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level (default: INFO)')
    parser.add_argument('--log-file', metavar='PATH',
                        help='Also write log records to this file')
    parser.add_argument('--no-tickets', action='store_true',
                        help='Do not print the issued tickets')
    parser.add_argument('--version', action='version', version=f'%(prog)s {AppConfig.VERSION}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    logger = setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        app = ParkingApplication(layout_path=args.layout)
    except LayoutError as e:
        logger.error(f"Cannot build parking lot: {e}")
        return 1

    app.run_demo()
    app.report(show_tickets=not args.no_tickets)
    logger.info("Application shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
