"""
Wire-level helpers: connections, line reading, response scanning and request rendering.
"""
