"""Database connection and session management.

This module is a thin shim over :mod:`clerk_sync.infrastructure.database`.
Imports of :mod:`clerk_sync.database` keep working while the
infrastructure layer owns the actual implementation.
"""

from clerk_sync.infrastructure.database import *  # noqa: F401,F403
