"""
ipv6ready - IPv4/IPv6 Connectivity Readiness Check

Entry point for running as a module:
    python -m ipv6ready run
"""

from .cli import main

if __name__ == '__main__':
    main()
