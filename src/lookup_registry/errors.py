"""Error taxonomy shared by the store, the codecs and the client side.

Program errors keep the numeric codes the on-chain registry program uses, so a
failure observed locally can be matched against one reported by a cluster.
"""

from __future__ import annotations

from solders.pubkey import Pubkey


class LookupRegistryError(Exception):
    """Base class for every error raised by this package."""

    code: int | None = None


# Categories


class NotFoundError(LookupRegistryError):
    pass


class InvalidArgumentError(LookupRegistryError):
    pass


class InvalidStateError(LookupRegistryError):
    pass


class CapacityExceeded(LookupRegistryError):
    pass


class DecodeError(LookupRegistryError):
    pass


class TransportError(LookupRegistryError):
    pass


# Not found


class AccountNotFound(NotFoundError):
    def __init__(self, address: Pubkey) -> None:
        super().__init__(f"Account not found: {address}")
        self.address = address


class RegistryNotFound(NotFoundError):
    def __init__(self, address: Pubkey) -> None:
        super().__init__(f"Registry does not exist {address}")
        self.address = address


# Program errors


class InvalidDiscriminator(InvalidArgumentError):
    code = 10000

    def __init__(self, message: str = "Invalid discriminator used") -> None:
        super().__init__(message)


class InvalidSlot(InvalidArgumentError):
    code = 10001

    def __init__(self, message: str = "Slot cannot be earlier than the last slot used") -> None:
        super().__init__(message)


class InvalidLookupTable(InvalidArgumentError):
    code = 10002

    def __init__(self, message: str = "Invalid lookup table") -> None:
        super().__init__(message)


class TooManyEntries(CapacityExceeded):
    code = 10003

    def __init__(self, message: str = "There are too many entries in the registry account") -> None:
        super().__init__(message)


class InvalidState(InvalidStateError):
    code = 10004

    def __init__(self, message: str = "The lookup registry is in an invalid state") -> None:
        super().__init__(message)


# Environment errors


class AlreadyExists(InvalidStateError):
    def __init__(self, address: Pubkey) -> None:
        super().__init__(f"Account already in use: {address}")
        self.address = address


class InsufficientFunds(InvalidArgumentError):
    def __init__(self, address: Pubkey, required: int, available: int) -> None:
        super().__init__(f"Insufficient funds in {address}: required {required}, available {available}")
        self.address = address
        self.required = required
        self.available = available


class LookupTableNotClosable(InvalidStateError):
    def __init__(self, address: Pubkey, remaining_slots: int) -> None:
        super().__init__(f"Lookup table {address} is still deactivating ({remaining_slots} slots remaining)")
        self.address = address
        self.remaining_slots = remaining_slots


class LookupTableFull(CapacityExceeded):
    pass


class UninitializedAccount(DecodeError):
    def __init__(self, message: str = "Account is not initialized") -> None:
        super().__init__(message)


__all__ = [
    "LookupRegistryError",
    "NotFoundError",
    "InvalidArgumentError",
    "InvalidStateError",
    "CapacityExceeded",
    "DecodeError",
    "TransportError",
    "AccountNotFound",
    "RegistryNotFound",
    "InvalidDiscriminator",
    "InvalidSlot",
    "InvalidLookupTable",
    "TooManyEntries",
    "InvalidState",
    "AlreadyExists",
    "InsufficientFunds",
    "LookupTableNotClosable",
    "LookupTableFull",
    "UninitializedAccount",
]
