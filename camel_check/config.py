"""
Configuration settings for the camel checker.
"""

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Server location
CAMEL_HOST = os.environ.get("CAMEL_HOST", "localhost")
CAMEL_PORT = int(os.environ.get("CAMEL_PORT", "10000"))
CAMEL_TLS_PORT = int(os.environ.get("CAMEL_TLS_PORT", "10500"))

# Self-signed certificates are the norm on test servers
CAMEL_TLS_VERIFY = _env_flag("CAMEL_TLS_VERIFY")

# Request line and headers as they go out on the wire
CAMEL_PATH = "/portal/camel"
CAMEL_HOST_HEADER = os.environ.get("CAMEL_HOST_HEADER", "localhost:10000")
SESSION_COOKIE_NAME = "portal"

# Protocol name used for endpoint lookups
HTTP_PROTOCOL = "HTTP"

DEFAULT_CREDENTIALS = {
    "username": "princess",
    "password": "password",
}

# Alphabet for randomized fixture values
RANDOM_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
RANDOM_LENGTH = 64

# Timeout constants (in seconds)
TIMEOUT_CONSTANTS = {
    "connect": 10.0,  # TCP connect and TLS handshake
    "read": 30.0,  # Socket reads once connected
    "server_wait": 30.0,  # Readiness probing before a run
    "probe_interval": 1.0,  # Delay between readiness probes
}

# Buffer constants (in bytes)
BUFFER_CONSTANTS = {
    "append_hint": 8192,  # Growth hint for body accumulation
    "recv_chunk": 8192,  # Largest single socket read
    "max_line": 65536,  # Longest status or header line accepted
}

# Bundled scenario fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"
