"""
Secrets Backends

Available backends for secrets storage.
"""

from .keyring import KeyringBackend

# Registry of available backends
BACKENDS = {
    "keyctl": KeyringBackend,
    "keyring": KeyringBackend,  # Alias
}

__all__ = ["BACKENDS", "KeyringBackend"]
