"""
Render the Kubernetes manifests of a hosted control plane cluster.
"""

from hcp_render.api import ClusterParams
from hcp_render.render.cluster import render_cluster_manifests

__all__ = ["ClusterParams", "render_cluster_manifests"]

__version__ = "0.1.0"
