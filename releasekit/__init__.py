"""Release housekeeping tools: documentation checks, version placeholders, fuel-core pinning and changelogs."""

__version__ = "0.75.0"
__all__ = ["__version__"]