class TransitError(Exception):
    """Base class for schedule resolution failures."""


class LoadError(TransitError):
    """Static GTFS data could not be fetched, extracted or parsed."""


class DatasetUnavailable(LoadError):
    """No snapshot was ever loaded and every source failed."""


class ResolutionError(TransitError):
    """A request cannot be resolved (no active service, unknown station...)."""


class OverlayError(TransitError):
    """Real-time payload could not be decoded."""
