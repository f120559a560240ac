"""
Scripted client checks for the camel JSON-RPC web interface.
"""

__version__ = "0.1.0"
