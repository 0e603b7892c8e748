"""Version information for logistics-rbac."""

__version__ = "0.1.0"
