"""Centralized exit-code contract for all CLI commands.

Code  Meaning
----  -------
  0   Success — deck built, or ``check`` found nothing wrong
  1   Violation — ``check`` found a deck that breaks an output invariant
  2   Error — usage error, missing source, converter failure, I/O failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2
