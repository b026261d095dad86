"""
Network collaborators: mirror node lookups and locator resolution.
"""
from .mirror_node import MirrorNodeClient, EntityProbeClient, MIRROR_NODE_URLS
from .hrl import HRL, HRLResolver, ResolvedReference, parse_hrl, standard_from_memo

__all__ = [
    "MirrorNodeClient",
    "EntityProbeClient",
    "MIRROR_NODE_URLS",
    "HRL",
    "HRLResolver",
    "ResolvedReference",
    "parse_hrl",
    "standard_from_memo",
]
