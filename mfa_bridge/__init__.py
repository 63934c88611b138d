"""Homegrown username/password login with Descope as the second factor."""

__version__ = "1.0.0"
