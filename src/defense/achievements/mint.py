"""Achievement minting — request validation and the relay client.

A player who survives the final wave may claim a non-transferable
achievement token.  This module owns the server side of that claim:

  1. validate the wallet address format (``0x`` + 40 hex digits)
  2. check the service is configured (contract address + minter key)
  3. hand the address to a ``Minter`` and translate its failures

The chain itself is not modelled here.  ``HttpRelayMinter`` forwards the
request to a signing relay over HTTP; tests and alternative deployments
inject any object with a ``mint(address) -> MintReceipt`` method.

Every failure is a ``MintError`` carrying the HTTP status the API should
return.  Nothing is retried.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

import requests
from loguru import logger

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class MintError(Exception):
    """Base class for mint failures; ``status_code`` is the HTTP status."""

    status_code = 500


class InvalidAddressError(MintError):
    status_code = 400


class MintConfigurationError(MintError):
    status_code = 500


class InsufficientFundsError(MintError):
    status_code = 500


class MintRejectedError(MintError):
    status_code = 400


class MintFailedError(MintError):
    status_code = 500


@dataclass(frozen=True)
class MintReceipt:
    tx_hash: str
    success: bool = True


class Minter(Protocol):
    def mint(self, address: str) -> MintReceipt: ...


@dataclass(frozen=True)
class MintConfig:
    contract_address: str = ""
    relay_url: str = ""
    minter_key: str = ""


def is_valid_address(address: str) -> bool:
    return bool(address) and _ADDRESS_RE.match(address) is not None


def classify_failure(message: str, code: str | None = None) -> MintError:
    """Map a relay/chain failure description onto a MintError subclass."""
    if code == "INSUFFICIENT_FUNDS":
        return InsufficientFundsError("Insufficient funds for transaction")
    if "user rejected" in message.lower():
        return MintRejectedError("Transaction was rejected")
    return MintFailedError(message or "Failed to mint achievement")


class HttpRelayMinter:
    """Forwards mint requests to a signing relay.

    The relay receives ``{"contract": ..., "address": ...}`` with the minter
    key as a bearer token and answers ``{"tx_hash": ..., "status": 1}`` on
    success or ``{"error": ..., "code": ...}`` on failure.
    """

    def __init__(self, config: MintConfig, timeout: float = 30.0) -> None:
        self._config = config
        self._timeout = timeout

    def mint(self, address: str) -> MintReceipt:
        try:
            resp = requests.post(
                f"{self._config.relay_url.rstrip('/')}/mint",
                json={"contract": self._config.contract_address, "address": address},
                headers={"Authorization": f"Bearer {self._config.minter_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise MintFailedError(f"Relay unreachable: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400 or "error" in data:
            raise classify_failure(str(data.get("error", resp.text)), data.get("code"))
        return MintReceipt(
            tx_hash=str(data.get("tx_hash", "")),
            success=data.get("status", 1) == 1,
        )


class AchievementService:
    """Validates achievement claims and issues them through a Minter."""

    def __init__(self, config: MintConfig, minter: Minter | None = None) -> None:
        self.config = config
        self._minter = minter

    @property
    def minter(self) -> Minter | None:
        return self._minter

    def issue(self, address: str) -> MintReceipt:
        if not address:
            raise InvalidAddressError("Wallet address is required")
        if not is_valid_address(address):
            raise InvalidAddressError("Invalid wallet address format")
        if not self.config.contract_address:
            raise MintConfigurationError("Achievement contract address not configured")
        if self._minter is None or not self.config.minter_key:
            raise MintConfigurationError("Minter credentials not configured")

        logger.info(f"Minting achievement to {address}")
        receipt = self._minter.mint(address)
        if not receipt.success:
            raise MintFailedError("Transaction failed")
        logger.info(f"Achievement minted: tx={receipt.tx_hash}")
        return receipt
