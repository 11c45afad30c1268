"""Custom exceptions for vidmind."""


class VidmindError(Exception):
    """Base exception for vidmind."""

    pass


class ConfigurationError(VidmindError):
    """A required setting (usually an API key) is missing."""

    pass


class MissingParameterError(VidmindError, ValueError):
    """A required input parameter was not supplied."""

    pass


class AnalysisError(VidmindError):
    """Video summarization API call failed."""

    pass


class GenerationError(VidmindError):
    """Text generation provider call failed."""

    pass


class MindmapParseError(VidmindError, ValueError):
    """No parse strategy produced a valid mindmap document."""

    pass


class RenderError(VidmindError):
    """Mindmap rendering failed."""

    pass
