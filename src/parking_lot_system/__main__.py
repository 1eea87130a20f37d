# File: src/parking_lot_system/__main__.py
import sys

from .main import main

sys.exit(main())
