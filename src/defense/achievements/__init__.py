"""Achievement issuance: validates claims and relays mint requests."""
from .mint import (
    AchievementService,
    HttpRelayMinter,
    InsufficientFundsError,
    InvalidAddressError,
    MintConfig,
    MintConfigurationError,
    MintError,
    MintFailedError,
    MintReceipt,
    MintRejectedError,
    Minter,
    is_valid_address,
)

__all__ = [
    "AchievementService",
    "HttpRelayMinter",
    "InsufficientFundsError",
    "InvalidAddressError",
    "MintConfig",
    "MintConfigurationError",
    "MintError",
    "MintFailedError",
    "MintReceipt",
    "MintRejectedError",
    "Minter",
    "is_valid_address",
]
