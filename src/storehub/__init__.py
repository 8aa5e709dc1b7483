"""storehub - authenticated, namespaced object storage hub."""

__version__ = "0.1.0"
