"""Structured JSON logging configuration.

This module is a thin shim over :mod:`clerk_sync.infrastructure.logging`.
Imports of :mod:`clerk_sync.logging_config` keep working while the
infrastructure layer owns the actual implementation.
"""

from clerk_sync.infrastructure.logging import *  # noqa: F401,F403
