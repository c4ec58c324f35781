"""
Custom error types for account management.

Provides a small exception hierarchy so callers (and the tool layer) can tell
configuration mistakes, missing accounts and authentication requirements apart.
"""

# =============================================================================
# Base Exception Hierarchy
# =============================================================================


class AccountsMCPError(Exception):
    """Base exception for all accounts MCP errors."""

    pass


class AccountManagerError(AccountsMCPError):
    """Raised by account directory operations.

    Attributes:
        code: Stable machine-readable error code.
        retryable: Whether retrying the same call could succeed.
    """

    def __init__(self, message: str, code: str, retryable: bool = False):
        super().__init__(message)
        self.code = code
        self.retryable = retryable


# =============================================================================
# Account Errors
# =============================================================================


class AccountNotFoundError(AccountManagerError):
    """Raised when an account reference (email or alias) cannot be resolved."""

    def __init__(self, account_ref: str, message: str | None = None):
        super().__init__(message or f"Account '{account_ref}' not found", "ACCOUNT_NOT_FOUND")
        self.account_ref = account_ref


class RequiresAuthenticationError(AccountManagerError):
    """Raised when a service has no usable account and one must be connected."""

    def __init__(self, service: str, account_id: str | None = None):
        if account_id:
            message = f"No account found for {service} (account: {account_id}). Use account-switch to connect one."
        else:
            message = f"No account found for {service}. Use account-switch to connect one."
        super().__init__(message, "REQUIRES_AUTHENTICATION")
        self.service = service
        self.account_id = account_id


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AccountManagerError):
    """Raised when the caller or environment supplies an invalid configuration."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}", "CONFIGURATION_ERROR")


class InvalidKeyParameterError(ConfigurationError, ValueError):
    """Raised when a storage key cannot be built from the given identifiers."""

    def __init__(self, param: str, reason: str):
        super().__init__(f"Key parameter '{param}' {reason}")
        self.param = param
        self.reason = reason


# =============================================================================
# Storage Errors
# =============================================================================


class StoreError(AccountsMCPError):
    """Raised by the bundled key-value stores when the backing data is unusable."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
