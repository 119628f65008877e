"""Services for the presales core."""

from .key_value_store import (
    KeyValueStore,
    FileKeyValueStore,
    MemoryKeyValueStore,
    create_key_value_store,
)
from .generated_proposal_registry import (
    GeneratedProposalRegistry,
    create_generated_proposal_registry,
    get_generated_proposal_registry,
)
from .calculation_scheduler import (
    CALCULATION_CHANNELS,
    BatchCalculationManager,
    CalculationScheduler,
    DebouncedCalculationManager,
    ServiceDeskCalculations,
    create_debounced_calculations,
    get_calculation_scheduler,
)

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "create_key_value_store",
    "GeneratedProposalRegistry",
    "create_generated_proposal_registry",
    "get_generated_proposal_registry",
    "CALCULATION_CHANNELS",
    "BatchCalculationManager",
    "CalculationScheduler",
    "DebouncedCalculationManager",
    "ServiceDeskCalculations",
    "create_debounced_calculations",
    "get_calculation_scheduler",
]
