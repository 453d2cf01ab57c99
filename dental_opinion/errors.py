class AnalysisError(Exception):
    """Base class for failures of a single analysis call."""


class ConfigurationError(AnalysisError):
    """Raised before any network call when the credential is missing."""


class ProviderError(AnalysisError):
    """The model provider could not be reached or answered with an error."""


class ResponseParseError(AnalysisError):
    """The provider reply is not valid JSON or does not match the result shape."""
