"""
Resource Actions
================

Lists and runs resource actions (restart, resume, scale, ...) on the live
resources an application manages. Ships a CLI and an HTTP service.
"""

__version__ = "0.1.0"
