"""
Resource Actions - Shared Library
=================================

Logging, HTTP transport, retry helpers and schemas shared between the
resource-actions CLI and its HTTP service.
"""

__version__ = "0.1.0"
__author__ = "Resource Actions Team"
