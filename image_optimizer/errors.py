"""Exceptions that abort a whole optimization run."""


class ImageOptimizerError(Exception):
    """Base class for fatal run errors."""


class ValidationError(ImageOptimizerError):
    """An option value is out of range. Raised before any file is touched."""


class DiscoveryError(ImageOptimizerError):
    """A directory of the source tree could not be read."""


class OutputPrepError(ImageOptimizerError):
    """The output root could not be created."""
