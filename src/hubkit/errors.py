# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Exception types raised by the hubkit control plane."""


class HubkitError(Exception):
    """Base class for all hubkit errors."""


class InvalidArgumentError(HubkitError, ValueError):
    """Raised for unknown/empty adapter names or malformed arguments."""


class NotFoundError(HubkitError, LookupError):
    """Raised when a device id or adapter device does not exist."""


class AlreadyRunningError(HubkitError, RuntimeError):
    """Raised when a publishing server is started twice on one session."""


class UnsupportedError(HubkitError, RuntimeError):
    """Raised when the hub firmware is missing or too old."""


class InitializationFailedError(HubkitError):
    """
    Raised internally when an adapter initializer fails.

    Never surfaces from DeviceRegistry.get_adapter(); the lifecycle
    manager logs it and rolls the adapter back to uninitialized.
    """

    def __init__(self, adapter_name: str, reason: str):
        super().__init__(f"Initializing adapter {adapter_name!r} failed: {reason}")
        self.adapter_name = adapter_name
        self.reason = reason


class HubRequestError(HubkitError):
    """Raised when a request to the remote hub fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
