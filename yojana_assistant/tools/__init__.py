"""
Tools Package
Contains slot extraction, scheme lookup and the portal link catalog
"""
from .links import LINK_CATALOG, LOGIN_LINK, REGISTER_LINK, sanitize_links
from .schemes import (
    SchemeSource,
    StaticSchemeSource,
    RemoteSchemeSource,
    SchemeCriteria,
    create_scheme_source_from_settings,
    filter_schemes,
    normalize_scheme,
    normalize_schemes,
    select_schemes
)
from .slots import Extraction, extract, extract_slots, detect_intents

__all__ = [
    "LINK_CATALOG",
    "LOGIN_LINK",
    "REGISTER_LINK",
    "sanitize_links",
    "SchemeSource",
    "StaticSchemeSource",
    "RemoteSchemeSource",
    "SchemeCriteria",
    "create_scheme_source_from_settings",
    "filter_schemes",
    "normalize_scheme",
    "normalize_schemes",
    "select_schemes",
    "Extraction",
    "extract",
    "extract_slots",
    "detect_intents"
]
