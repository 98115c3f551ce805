"""
Configuration for the jujuform provider.
"""

from jujuform.config.provider import ProviderConfig

__all__ = ["ProviderConfig"]
