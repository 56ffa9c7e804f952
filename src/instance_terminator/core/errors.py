"""Exceptions shared across the instance terminator."""


class InstanceTerminatorError(Exception):
    """Base class for errors that abort an invocation."""
    pass


class ConfigurationError(InstanceTerminatorError):
    """Exception raised for configuration errors."""
    pass


class DiscoveryError(InstanceTerminatorError):
    """Exception raised when Auto Scaling Groups cannot be listed."""
    pass


class InstanceLookupError(InstanceTerminatorError):
    """Exception raised when instance launch times cannot be resolved."""
    pass
