# system/__init__.py
"""PulseCraft — System configuration."""
