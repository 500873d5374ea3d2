"""
ipv6ready - IPv4/IPv6 Connectivity Readiness Check

Runs a fixed battery of HTTP probes against specially-named endpoints
and turns the outcomes into diagnostic findings and readiness scores.
"""

__version__ = "1.0.0"
__author__ = "ipv6ready"
