"""
Pipeline del marketplace.

Fuente -> agregación -> estado de guardado -> filtros y orden,
más el toggle de guardado y la vista de guardados.
"""

from kosmarket.marketplace.aggregator import AggregatedListings, aggregate
from kosmarket.marketplace.source import ListingSource
from kosmarket.marketplace.saved_state import SaveStateResolver
from kosmarket.marketplace.engine import FilterSortEngine, parse_timestamp
from kosmarket.marketplace.mutator import SaveState, SaveStateMutator
from kosmarket.marketplace.saved import SavedPropertiesService
from kosmarket.marketplace.session import MarketplaceSession

__all__ = [
    "AggregatedListings",
    "aggregate",
    "ListingSource",
    "SaveStateResolver",
    "FilterSortEngine",
    "parse_timestamp",
    "SaveState",
    "SaveStateMutator",
    "SavedPropertiesService",
    "MarketplaceSession",
]
