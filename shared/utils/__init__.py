"""
Resource Actions - Shared Utilities Package
===========================================

Logging, HTTP transport and retry helpers.
"""

from shared.utils.logging import get_logger, setup_logging
from shared.utils.http_client import ServiceClient, ServiceClientConfig
from shared.utils.retry import with_retry, RetryConfig

__all__ = [
    "get_logger",
    "setup_logging",
    "ServiceClient",
    "ServiceClientConfig",
    "with_retry",
    "RetryConfig",
]
