"""Alert-rule generation from environment profiles and rule templates."""

__version__ = "0.1.0"
