"""
Distribution services for LocalShare.
"""

from localshare.services.catalog import ArtifactCatalog
from localshare.services.distribution import DistributionEngine
from localshare.services.registry import RecipientRegistry
from localshare.services.viewer import ViewerSession

__all__ = [
    "ArtifactCatalog",
    "DistributionEngine",
    "RecipientRegistry",
    "ViewerSession",
]
