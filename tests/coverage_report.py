# File: tests/coverage_report.py
#!/usr/bin/env python3
"""
Generate test coverage report for the Parking Lot System.
Requires: pip install -e .[test]
"""

import sys
from pathlib import Path

import coverage

sys.path.insert(0, str(Path(__file__).parent.parent))


def generate_coverage_report(html_dir: str = 'htmlcov', xml_file: str = 'coverage.xml') -> bool:
    """Run the whole suite under coverage and write console, HTML and XML reports"""
    cov = coverage.Coverage(
        source=['parking_lot_system'],
        omit=['*/tests/*', '*/__pycache__/*', '*/__main__.py']
    )
    cov.start()

    try:
        from tests.run_tests import run_all_tests
        result = run_all_tests()
    finally:
        cov.stop()
        cov.save()

    print("\n" + "=" * 60)
    print("Test Coverage Report")
    print("=" * 60)

    print("\nConsole Report:")
    cov.report(show_missing=True)

    cov.html_report(directory=html_dir)
    print(f"HTML report generated in '{html_dir}' directory")

    cov.xml_report(outfile=xml_file)
    print(f"XML report generated as '{xml_file}'")

    return result.wasSuccessful()


if __name__ == "__main__":
    sys.exit(0 if generate_coverage_report() else 1)
