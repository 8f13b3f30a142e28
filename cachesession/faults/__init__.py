"""
CacheSession Faults - Typed fault signals.

Errors here are NOT just exceptions: every fault carries a stable code,
a domain, a severity and retry semantics so callers can decide what to do
without parsing messages.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
- ConfigFault: Invalid configuration
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    DOMAIN_DEFAULTS,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "DOMAIN_DEFAULTS",
]
