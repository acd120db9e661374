#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Error taxonomy for remote API failures.

All three concrete errors reach the view layer the same way, as a
FetchFailed result carrying the error text.
"""


class RemoteError(Exception):
    """Base class for any failure talking to the remote API."""


class RemoteNotFound(RemoteError):
    """The requested resource (e.g. a log group) does not exist."""


class RemoteTransportError(RemoteError):
    """Network or API-level failure."""


class RemoteMalformedResponse(RemoteError):
    """The response was nil or did not have the expected shape."""
