"""Scan state values published by the engine.

The engine emits these values on every transition. Consumers treat them
as plain data; the engine never depends on who is listening.
"""

from dataclasses import dataclass
from enum import Enum


class ScanPhase(str, Enum):
    """Phase of an in-flight scan, in execution order."""

    INDEXING = "indexing"
    DUPLICATES = "duplicates"
    ANALYZING = "analyzing"
    JUNK = "junk"


class StateKind(str, Enum):
    """Discriminator for ScanState variants."""

    IDLE = "idle"
    SCANNING = "scanning"
    DONE = "done"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ScanState:
    """Base of all scan states."""

    @property
    def kind(self) -> StateKind:
        raise NotImplementedError

    @property
    def is_terminal(self) -> bool:
        """Check if the state ends a scan (Done, Cancelled or Error)."""
        return self.kind in (StateKind.DONE, StateKind.CANCELLED, StateKind.ERROR)


@dataclass(frozen=True, slots=True)
class Idle(ScanState):
    """No scan has run yet."""

    @property
    def kind(self) -> StateKind:
        return StateKind.IDLE


@dataclass(frozen=True, slots=True)
class Scanning(ScanState):
    """A scan is running.

    Attributes:
        files_found: Number of files indexed so far.
        phase: Current phase of the scan.
    """

    files_found: int = 0
    phase: ScanPhase = ScanPhase.INDEXING

    @property
    def kind(self) -> StateKind:
        return StateKind.SCANNING


@dataclass(frozen=True, slots=True)
class Done(ScanState):
    """The last scan completed and its results are published."""

    @property
    def kind(self) -> StateKind:
        return StateKind.DONE


@dataclass(frozen=True, slots=True)
class Cancelled(ScanState):
    """The last scan was cancelled before completion."""

    @property
    def kind(self) -> StateKind:
        return StateKind.CANCELLED


@dataclass(frozen=True, slots=True)
class Error(ScanState):
    """The last scan failed.

    Attributes:
        message: Human-readable failure description.
    """

    message: str = "Scan failed"

    @property
    def kind(self) -> StateKind:
        return StateKind.ERROR


def describe(state: ScanState) -> str:
    """Return a one-line description of a state for display."""
    if isinstance(state, Scanning):
        return f"Scanning ({state.phase.value}): {state.files_found:,} files"
    if isinstance(state, Error):
        return f"Error: {state.message}"
    return state.kind.value.capitalize()
