"""
Exceptions raised by database backends.

Repositories translate driver-specific exceptions into these classes
so that callers do not depend on the storage engine in use.
"""

from __future__ import annotations


class StorageError(Exception):
    """A data access operation failed, for instance because of
    a constraint violation"""


class StorageUnavailable(StorageError):
    """The backing store could not be opened or reached"""
