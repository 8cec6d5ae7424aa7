"""Domain exceptions raised by the scoring core and its collaborators."""


class InvalidInputError(ValueError):
    """Caller passed something that is not a batch of driver records."""


class CatalogError(ValueError):
    """Behavior catalog table is missing, malformed or inconsistent."""


class IngestionError(ValueError):
    """Uploaded telemetry file could not be read."""
