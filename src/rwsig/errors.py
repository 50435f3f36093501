"""
error types for rabin-williams signatures.

every error derives from RabinWilliamsError, which is a ValueError so callers
that only care about bad input can catch the builtin.
"""


class RabinWilliamsError(ValueError):
    """base class for all rabin-williams errors"""

    default_message = "rabin-williams error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class InvalidKeySize(RabinWilliamsError):
    default_message = "Invalid key size"


class InvalidPrime(RabinWilliamsError):
    default_message = "Invalid prime number"


class InvalidKey(RabinWilliamsError):
    """persisted key material is malformed or inconsistent"""

    default_message = "Invalid key material"


class MessageTooLarge(RabinWilliamsError):
    default_message = "Message too large"


class InvalidSignature(RabinWilliamsError):
    default_message = "Invalid signature"


class SquareRootModPrimeFailed(RabinWilliamsError):
    default_message = "Square root modulo prime computation failed"


class ComputationError(RabinWilliamsError):
    default_message = "Internal computation error"


class InvalidMessage(RabinWilliamsError):
    """value to sign is zero or shares a factor with the modulus"""

    default_message = "Invalid message representative"


class InvalidConfiguration(RabinWilliamsError):
    default_message = "Invalid configuration"
