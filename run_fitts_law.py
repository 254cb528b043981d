"""Entry point script for the Fitts's Law pointing task.

This small wrapper simply dispatches to :mod:`fitts_law.cli`, so the task can
be launched with ``python -m fitts_law`` *or* by executing this file directly
from a checkout.
"""
from __future__ import annotations

from fitts_law.cli import main


if __name__ == "__main__":
    main()
