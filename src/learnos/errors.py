"""Exception hierarchy."""


class LearnOSError(Exception):
    """Base class for all application errors."""


class ConfigError(LearnOSError):
    pass


class MaterialRequiredError(LearnOSError, ValueError):
    """Raised when an action needs study material and none was given."""


class GenerationError(LearnOSError):
    """The content generation service failed or returned something unusable."""


class GenerationTimeout(GenerationError):
    pass


class GenerationCancelled(GenerationError):
    pass


class ShareTokenError(LearnOSError, ValueError):
    """A share token could not be decoded into a guide and its material."""
