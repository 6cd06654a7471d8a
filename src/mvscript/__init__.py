"""The mvscript scripting language parser."""

__version__ = "0.1.0"
