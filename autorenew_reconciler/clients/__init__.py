"""API clients for the registrar and CRM directories."""

from .base import NetworkError, ParseError, RequestPacer, build_session  # noqa: F401
from .deals import DealClient, DealFieldMap, deal_from_entry  # noqa: F401
from .registrar import RegistrarClient, domains_from_payload, parse_domain_list  # noqa: F401

__all__ = [
    "DealClient",
    "DealFieldMap",
    "NetworkError",
    "ParseError",
    "RegistrarClient",
    "RequestPacer",
    "build_session",
    "deal_from_entry",
    "domains_from_payload",
    "parse_domain_list",
]
