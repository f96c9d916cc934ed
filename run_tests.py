"""
Test runner script for The Rat and The Time.
"""
import subprocess
import sys
from pathlib import Path


def run_unit_tests() -> bool:
    """Run simulation and persistence unit tests."""
    print("Running unit tests...")
    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "tests/test_accumulator.py",
        "tests/test_aggregator.py",
        "tests/test_store.py",
        "-v"
    ], cwd=Path(__file__).parent)

    return result.returncode == 0


def run_service_tests() -> bool:
    """Run game loop and HTTP endpoint tests."""
    print("Running service tests...")
    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "tests/test_loop.py",
        "tests/test_service.py",
        "-v"
    ], cwd=Path(__file__).parent)

    return result.returncode == 0


def main():
    """Run all tests."""
    print("The Rat and The Time - Tests")
    print("=" * 50)

    success = True

    if not run_unit_tests():
        print("✗ Unit tests failed!")
        success = False
    else:
        print("✓ Unit tests passed!")

    print()

    if not run_service_tests():
        print("✗ Service tests failed!")
        success = False
    else:
        print("✓ Service tests passed!")

    print("\n" + "=" * 50)
    if success:
        print("✓ All tests passed!")
        sys.exit(0)
    else:
        print("✗ Some tests failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
