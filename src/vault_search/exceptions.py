"""Custom exception hierarchy for the vault search engine."""


class VaultSearchError(Exception):
    """Base exception for all vault search errors."""


class FetchError(VaultSearchError):
    """The caller's document corpus could not be loaded."""


class GenerationError(VaultSearchError):
    """Error during grounded generation (quota, transport or malformed output)."""


class GenerationTimeout(GenerationError):
    """The generative call did not finish within its time budget."""


class InvalidReferenceError(VaultSearchError):
    """A model-emitted document reference carries no usable identifier."""


class SessionError(VaultSearchError):
    """Error reading or writing chat session state."""


class ConfigurationError(VaultSearchError):
    """Error in system configuration."""
