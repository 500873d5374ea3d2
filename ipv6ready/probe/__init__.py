"""
Probe engine for ipv6ready
"""

from .observation import parse_observation
from .runner import Runner, first_observations

__all__ = ['Runner', 'first_observations', 'parse_observation']
