"""
Signed Louvain Package - Hierarchical community detection in weighted, signed, directed networks.
"""

# Import main classes for easy access
from .graph import Graph, ListMatrix, ROW, COL
from .louvain import Louvain, LevelRecord
from .objective import CommunityObjective, ObjectiveParameters, LocalMove
from .modularity import Modularity
from .signed_modularity import SignedModularity
from .config import LouvainConfig, EnsembleConfig
from .ensemble import EnsembleResult, run_ensemble, seeded_objective_factory
from .analysis import community_table, compare_partitions, count_communities

# Import core utilities that might be directly useful
from .core_utilities import (
    TimingStats,
    ScoreStats,
    ramp,
    reindex_consecutive,
)

# Define what gets imported with `from signed_louvain import *`
__all__ = [
    # Main classes
    'Graph',
    'ListMatrix',
    'Louvain',
    'LevelRecord',
    'CommunityObjective',
    'ObjectiveParameters',
    'LocalMove',
    'Modularity',
    'SignedModularity',

    # Configuration
    'LouvainConfig',
    'EnsembleConfig',

    # Ensembles and analysis
    'EnsembleResult',
    'run_ensemble',
    'seeded_objective_factory',
    'community_table',
    'compare_partitions',
    'count_communities',

    # Utility classes
    'TimingStats',
    'ScoreStats',

    # Core functions
    'ramp',
    'reindex_consecutive',
    'ROW',
    'COL',
]

# Package metadata
__version__ = '1.0.0'
__author__ = 'Connor Frankston'
