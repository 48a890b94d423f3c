# fan_agent/errors.py
"""Custom exception classes for fan-agent."""

class FanAgentError(Exception):
    """Base class for agent-specific errors."""
    def __init__(self, message: str, error_code: str = "AgentError"):
        self.message = message
        self.error_code = error_code
        super().__init__(f"[{error_code}] {message}")

class ConfigurationError(FanAgentError):
    """Error related to configuration or environment setup."""
    def __init__(self, message: str):
        super().__init__(message, error_code="ConfigurationError")

class InvalidInputError(FanAgentError):
    """Error for malformed request input, such as an unparseable header."""
    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidInput")

class NotFoundError(FanAgentError):
    """No document exists for the requested identity."""
    def __init__(self, message: str):
        super().__init__(message, error_code="NotFound")

class InvalidNameError(FanAgentError):
    """Malformed principal name."""
    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidName")

class SourceError(FanAgentError):
    """A document could not be read or parsed by its source."""
    def __init__(self, message: str):
        super().__init__(message, error_code="SourceError")

class UnsupportedMediaTypeError(FanAgentError):
    """The requested content type cannot be served."""
    def __init__(self, message: str):
        super().__init__(message, error_code="UnsupportedMediaType")

class EncodingError(FanAgentError):
    """Serialization or deserialization of a document failed."""
    def __init__(self, message: str):
        super().__init__(message, error_code="EncodingError")

class KeyNotFoundError(FanAgentError):
    """Error when a required cryptographic key is not found."""
    def __init__(self, message: str):
        super().__init__(message, error_code="KeyNotFound")

class InvalidKeyFormatError(FanAgentError):
    """Error when a key is found but is in an invalid format."""
    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidKeyFormat")

class UnsupportedAlgorithmError(FanAgentError):
    """The signing key's curve has no signature algorithm mapped to it."""
    def __init__(self, message: str):
        super().__init__(message, error_code="UnsupportedAlgorithm")

class SignatureError(FanAgentError):
    """Error related to a cryptographic signing or verification failure."""
    def __init__(self, message: str = "Signature operation failed"):
        super().__init__(message, error_code="SignatureError")
