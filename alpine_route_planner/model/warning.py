"""PlanningWarning - Degraded-mode notices attached to a planned route.

Warnings indicate that planning succeeded with reduced data quality:
- Elevation service failed, elevations defaulted to 0
- Trail data unavailable, search ran without trail preference
- Trail snapping skipped because no network was available
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlanningWarning(ABC):
    """Abstract base class for planning warnings.

    Subclasses store specific parameters and compute message as property.
    Use isinstance() to check warning type.
    Each subclass has a warning_type field for serialization.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Human-readable warning message."""

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ElevationUnavailableWarning(PlanningWarning):
    """Elevation lookup failed and affected points were given elevation 0.

    Attributes:
        stage: Planning stage where the lookup failed ("search" or "snapping")
        reason: Error text reported by the elevation provider
        affected_points: Number of points whose elevation defaulted to 0
        warning_type: Type identifier for serialization
    """

    stage: str
    reason: str
    affected_points: int = 0
    warning_type: str = "ElevationUnavailableWarning"

    @property
    def message(self) -> str:
        detail = f" ({self.affected_points} points set to 0m)" if self.affected_points else ""
        return f"Elevation data unavailable during {self.stage}{detail}: {self.reason}"


@dataclass(frozen=True)
class TrailDataUnavailableWarning(PlanningWarning):
    """Trail network could not be fetched, the search ran without trail preference.

    Attributes:
        reason: Error text reported by the trail provider
        source: Name of the failing provider, if known
        warning_type: Type identifier for serialization
    """

    reason: str
    source: Optional[str] = None
    warning_type: str = "TrailDataUnavailableWarning"

    @property
    def message(self) -> str:
        origin = f" from {self.source}" if self.source else ""
        return f"Trail data unavailable{origin}, route ignores trails: {self.reason}"


@dataclass(frozen=True)
class TrailSnappingSkippedWarning(PlanningWarning):
    """Post-search trail snapping was skipped.

    Attributes:
        reason: Why snapping did not run
        warning_type: Type identifier for serialization
    """

    reason: str
    warning_type: str = "TrailSnappingSkippedWarning"

    @property
    def message(self) -> str:
        return f"Trail snapping skipped: {self.reason}"
