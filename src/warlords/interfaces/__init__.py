"""Protocol interfaces for the collaborators the kernel depends on."""

from warlords.interfaces.narrative import NarrativeContext, NarrativeService
from warlords.interfaces.persistence import AutoSaver

__all__ = ["AutoSaver", "NarrativeContext", "NarrativeService"]
