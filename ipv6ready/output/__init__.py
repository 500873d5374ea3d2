"""
Output modules for ipv6ready
"""

from .console import ConsoleOutput
from .json_export import JsonExporter, load_run

__all__ = ['ConsoleOutput', 'JsonExporter', 'load_run']
