"""Exception hierarchy for timezone region lookup."""


class TzLocateError(Exception):
    """Base class for tzlocate errors."""


class RegionLoadError(TzLocateError, ValueError):
    """Exception raised when a region cannot be admitted to the store."""


class StoreFrozenError(TzLocateError, RuntimeError):
    """Exception raised when adding to a store that is already indexed."""


class DataLoadError(TzLocateError):
    """Exception raised for unreadable or unparsable region data files."""


class ConfigError(TzLocateError):
    """Exception raised for missing or invalid configuration values."""


class AmbiguousMatchError(TzLocateError):
    """Exception raised for multi-zone matches when the policy forbids them."""

    def __init__(self, zone_ids, x: float, y: float):
        self.zone_ids = frozenset(zone_ids)
        self.x = x
        self.y = y
        super().__init__(f"Point ({x}, {y}) is contained in {len(self.zone_ids)} zones: {', '.join(sorted(self.zone_ids))}")


class GeometryDefectError(TzLocateError):
    """Exception raised when a region's rings cannot be tested for containment."""
