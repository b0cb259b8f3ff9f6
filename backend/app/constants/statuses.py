"""
statuses.py
- Purpose: Central source of truth for the progress steps of an extraction run.
- Design: Keep FE-facing values stable and explicit.
"""

from enum import Enum


class ProcessState(str, Enum):
    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    SPLITTING = "SPLITTING"
    EXTRACTING = "EXTRACTING"
    GENERATING = "GENERATING"
    DONE = "DONE"
