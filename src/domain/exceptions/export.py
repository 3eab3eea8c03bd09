class TransitExportError(Exception):
    """Base exception for the select-then-export workflow."""


class FetchFailed(TransitExportError):
    """Raised when the transit data provider errors or returns a malformed payload."""


class PrerequisiteMissing(TransitExportError):
    """Raised when a selection or export is attempted without its upstream selection."""


class MissingData(TransitExportError):
    """Raised when GPX serialization gets empty or malformed input."""
