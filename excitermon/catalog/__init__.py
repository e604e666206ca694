"""
Static catalog of exciter measurements and alarms.

Usage:
    >>> from excitermon.catalog import create_default_catalog
    >>> catalog = create_default_catalog()
    >>> catalog.critical_keys("measurement")[0]
    'forwardPower'
"""

from excitermon.catalog.registry import Catalog, CatalogBuilder, create_default_catalog

__all__ = [
    "Catalog",
    "CatalogBuilder",
    "create_default_catalog",
]
