"""
Enrichment modules for ipv6ready
"""

from .ip_classifier import IPClassifier, IPFamily
from .asn_lookup import ASNLookup, ASNInfo

__all__ = ['IPClassifier', 'IPFamily', 'ASNLookup', 'ASNInfo']
