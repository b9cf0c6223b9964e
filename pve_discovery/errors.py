# /pve_discovery/errors.py
from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for everything the discovery engine raises."""


class ParseError(DiscoveryError, ValueError):
    """Subnet or address input that cannot be understood."""


class InvalidInputError(ParseError):
    """Input parsed fine but is not IPv4."""


class EnumerationError(DiscoveryError):
    """The OS refused to list network interfaces."""


class ProbeError(DiscoveryError):
    """A dial or HTTP probe failed at the transport level. Means "not found", never fatal."""
