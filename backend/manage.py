#!/usr/bin/env python
"""
Django entry point for the Chemical Equipment Telemetry Dashboard backend.

Use it to run the development server (``runserver``), apply the storage
migration (``migrate``) and create dashboard users (``createsuperuser``).
"""
import os
import sys


def main() -> None:
    """Run administrative tasks."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Make sure it is installed and available "
            "on your PYTHONPATH, and that the virtual environment is activated."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
