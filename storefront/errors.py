"""
Exceptions raised by the storefront engine.

Storage problems never raise; they come back as CorruptFormat results and
diagnostic events. Only the credential surface uses exceptions.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors"""
    def __init__(self, message: str, code: str = "STOREFRONT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class AuthenticationError(StorefrontError):
    """Unknown account or wrong password"""
    def __init__(self, email: str):
        self.email = email
        super().__init__(
            message=f"Invalid credentials for '{email}'",
            code="AUTH_FAILED"
        )


class RegistrationError(StorefrontError):
    """Account cannot be created"""
    def __init__(self, email: str, reason: str):
        self.email = email
        self.reason = reason
        super().__init__(
            message=f"Cannot register '{email}': {reason}",
            code="REGISTRATION_FAILED"
        )
