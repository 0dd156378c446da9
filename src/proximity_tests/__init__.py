"""proximity_tests - Permutation test for preferential genetic linkage by proximity.

Tests whether genetically linked community pairs are closer, by driving
distance or time, than random pairings of the same communities.  Each
iteration relabels the communities with a uniform random permutation
while holding the observed pair topology fixed, and the one-sided
p-value is the fraction of iterations whose mean travel cost falls
strictly below the observed mean.

Public API:
    .. autosummary::
        proximity_permutation_test
        print_results_table
        read_lookup_table
        read_observed_pairs
        generate_label_permutations
        reconstruct_pairs
        map_pair_positions
        calculate_p_values
        iteration_means
        summarize_observed
        get_missing_pair_policy
        set_missing_pair_policy
        CommunityRegistry
        LookupTable
        TravelCost
        PermutationEngine
        PermutationContext
        ObservedSummary
        ProximityTestResult
        ProximityTestError
        SchemaError
        NameResolutionError
        JoinError
"""

from ._config import get_missing_pair_policy, set_missing_pair_policy
from ._context import PermutationContext
from ._results import ObservedSummary, ProximityTestResult
from .communities import CommunityRegistry, map_pair_positions
from .core import proximity_permutation_test
from .display import print_results_table
from .engine import PermutationEngine
from .exceptions import JoinError, NameResolutionError, ProximityTestError, SchemaError
from .io import read_lookup_table, read_observed_pairs
from .lookup import LookupTable, TravelCost
from .permutations import generate_label_permutations, reconstruct_pairs
from .pvalues import calculate_p_values
from .statistics import iteration_means, summarize_observed

__all__ = [
    "ObservedSummary",
    "ProximityTestResult",
    "PermutationContext",
    "PermutationEngine",
    "CommunityRegistry",
    "LookupTable",
    "TravelCost",
    "proximity_permutation_test",
    "print_results_table",
    "read_lookup_table",
    "read_observed_pairs",
    "generate_label_permutations",
    "reconstruct_pairs",
    "map_pair_positions",
    "calculate_p_values",
    "iteration_means",
    "summarize_observed",
    "get_missing_pair_policy",
    "set_missing_pair_policy",
    "ProximityTestError",
    "SchemaError",
    "NameResolutionError",
    "JoinError",
]

__version__ = "0.1.0"
