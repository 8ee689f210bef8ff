"""
Ensemble - Run many independent Louvain instances concurrently and keep the best.

Louvain's result depends on the order nodes are visited in, so repeated runs
with different seeds and picking the highest objective is a cheap way to a
better partition. Every instance owns its partition; only the read-only Graph
is shared between threads.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import numpy as np
from tqdm.auto import tqdm

from .config import EnsembleConfig, LouvainConfig
from .core_utilities import ScoreStats, ramp, validate_partition
from .louvain import Louvain
from .objective import CommunityObjective


@dataclass
class EnsembleResult:
    best_id: int
    best_partition: np.ndarray
    best_score: float
    scores: Dict[int, float]
    partitions: Dict[int, np.ndarray]
    score_stats: Dict[str, float] = field(default_factory=dict)


def seeded_objective_factory(objective_cls, parameters, base_seed=0):
    """
    Objective factory giving run ``i`` the seed ``base_seed + i``.

    Parameters:
    -----------
    objective_cls : type
        A CommunityObjective subclass, e.g. SignedModularity
    parameters : ObjectiveParameters
        Shared parameters, only random_state differs between runs
    base_seed : int, default=0
        Seed of run 0
    """
    def factory(run_id):
        return objective_cls(parameters.with_seed(base_seed + run_id))
    return factory


def run_ensemble(graph, objective_factory: Callable[[int], CommunityObjective],
                 n_runs: Optional[int] = None, fold_count: Optional[int] = None,
                 initial_partition=None, config: Optional[EnsembleConfig] = None,
                 louvain_config: Optional[LouvainConfig] = None, verbose=False) -> EnsembleResult:
    """
    Detect communities ``n_runs`` times in parallel and return the best run.

    Parameters:
    -----------
    graph : Graph
        Network shared, read-only, by all runs
    objective_factory : callable
        Maps a run id to the CommunityObjective used by that run
    n_runs : int, optional
        Number of runs, defaults to config.n_runs
    fold_count : int, optional
        Fold budget of every run, defaults to config.fold_count
    initial_partition : array-like, optional
        Starting partition of every run, singletons if None
    config : EnsembleConfig, optional
        Run count, worker count and fold budget defaults
    louvain_config : LouvainConfig, optional
        Passed to every Louvain instance
    verbose : bool, default=False
        Whether to show progress

    Returns:
    --------
    EnsembleResult
        Best run by its own objective's evaluate; ties go to the lowest id
    """
    config = config if config is not None else EnsembleConfig()
    n_runs = config.n_runs if n_runs is None else int(n_runs)
    fold_count = config.fold_count if fold_count is None else int(fold_count)
    if n_runs < 1:
        raise ValueError(f"n_runs must be at least 1, got {n_runs}")

    if initial_partition is None:
        initial_partition = ramp(graph.node_count)
    initial_partition = validate_partition(initial_partition, graph.node_count)

    instances = [
        Louvain(objective_factory(run_id), config=louvain_config)
        .set_id(run_id)
        .init(graph, initial_partition, fold_count)
        for run_id in range(n_runs)
    ]

    if verbose:
        print(f"Running {n_runs} Louvain instances on {graph.node_count} nodes "
              f"(fold_count={fold_count}, max_workers={config.max_workers})")

    scores = {}
    partitions = {}
    stats = ScoreStats()
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {executor.submit(instance.run): instance for instance in instances}
        for future in tqdm(as_completed(futures), total=len(futures),
                           desc="Louvain runs", disable=not verbose):
            # Re-raises any exception from the worker
            future.result()
            instance = futures[future]
            partitions[instance.get_id()] = instance.get_partition()
            scores[instance.get_id()] = float(instance.evaluate())
            stats.update(scores[instance.get_id()])

    best_id = min(scores, key=lambda run_id: (-scores[run_id], run_id))
    result = EnsembleResult(
        best_id=best_id,
        best_partition=partitions[best_id],
        best_score=scores[best_id],
        scores=scores,
        partitions=partitions,
        score_stats=stats.get_stats(),
    )

    if verbose:
        print(f"Best run {best_id}: score={result.best_score:.6f} "
              f"(mean {stats.mean:.6f}, std {stats.get_std():.6f})")
    return result
