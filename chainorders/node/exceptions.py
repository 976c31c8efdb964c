"""
Chain and node related exception classes.
"""


class ChainError(Exception):
    """Base exception for all chain-related errors."""
    pass


class NetworkError(ChainError):
    """Exception raised when the node is unreachable or erroring."""

    def __init__(self, message: str, error_code: int = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class TransientError(NetworkError):
    """Exception for temporary node errors that can be retried (timeouts, overload)."""
    pass


class NodeRPCError(NetworkError):
    """Exception for JSON-RPC rejections that should not be retried."""
    pass


class BlockRangeTooLargeError(NodeRPCError):
    """Exception raised when the node refuses a log query because the range is too wide."""
    pass


class DecodeError(ChainError):
    """Exception raised when a log does not match the expected event signature."""
    pass


class WalletError(ChainError):
    """Exception raised when a transaction cannot be signed."""
    pass


class InvalidTransitionError(ChainError):
    """Exception raised for invalid action state machine transitions."""
    pass


class ActionError(ChainError):
    """Base exception for terminal action outcomes other than confirmation."""

    def __init__(self, message: str, transaction_hash: str = None):
        self.message = message
        self.transaction_hash = transaction_hash
        super().__init__(self.message)


class ActionTimeout(ActionError):
    """No nonce advance and no receipt observed before the timeout."""
    pass


class ActionReverted(ActionError):
    """The transaction receipt reports a failed (reverted) execution."""
    pass
