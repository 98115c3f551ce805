"""
Managed resource types.
"""

from jujuform.resources.cloud import resource_cloud

__all__ = ["resource_cloud"]
