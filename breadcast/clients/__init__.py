"""
External API client modules.

This module contains clients for interacting with external services
such as Pinata for pinning and an IPFS gateway for reads.
"""

from breadcast.clients.pinata_client import PinataClient

__all__ = ["PinataClient"]
