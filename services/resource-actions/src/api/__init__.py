"""
Resource Actions - HTTP API
"""
