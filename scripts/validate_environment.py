#!/usr/bin/env python3
"""Validate local booking environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bookings.domain.models import Reservation
from bookings.repository.data_repository import SQLiteBookingRepository
from bookings.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="bookings-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("itsdangerous", "itsdangerous"),
        ("multipart", "python-multipart"),
        ("email_validator", "email-validator"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    try:
        from importlib.metadata import version
    except Exception:  # pragma: no cover
        version = None  # type: ignore[assignment]
    for module_name, dist_name in package_specs:
        try:
            module = importlib.import_module(module_name)
            if version is not None:
                _ = version(dist_name)
            else:
                _ = getattr(module, "__version__", "unknown")
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        base_settings = get_settings()
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "bookings_validation.db",
        )
        repository = SQLiteBookingRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Room seeding
        try:
            seeded = repository.seed_rooms()
            expected = len(validation_settings.seed_room_names)
            if seeded != expected:
                raise RuntimeError(f"expected {expected} rooms, got {seeded}")
            ok, line = _print_result("Room seeding", True, f": {seeded} rooms")
        except Exception as exc:
            ok, line = _print_result("Room seeding", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Atomic reservation commit
        try:
            committed = repository.commit_reservation(
                Reservation(
                    first_name="Validation",
                    last_name="Guest",
                    phone="555-0100",
                    email="validation@example.com",
                    start_date=date(2030, 1, 1),
                    end_date=date(2030, 1, 3),
                    room_id=1,
                )
            )
            if repository.count_room_restrictions() != 1:
                raise RuntimeError("restriction row missing after commit")
            if repository.search_availability_by_date_by_room_id(
                date(2030, 1, 3), date(2030, 1, 5), 1
            ):
                raise RuntimeError("committed range still reported as available")
            ok, line = _print_result(
                "Reservation commit",
                True,
                f": reservation {committed.reservation_id}",
            )
        except Exception as exc:
            ok, line = _print_result("Reservation commit", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Bookings Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
