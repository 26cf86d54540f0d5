"""TechPro client core: optimistic feed mutations and presence tracking."""

__version__ = "0.1.0"
