# =======================================================================================
# access_request/__init__.py - Package Initialization
# =======================================================================================
"""
Access Request Service

Relays physical-access requests for doors and tools to the access-control
gateway: resolves the asset's reader, looks up the member's card, signs the
request and turns the gateway's answer into a message for the member.
"""

__version__ = "1.0.0"
