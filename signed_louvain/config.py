# signed_louvain/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

# Folding must shrink the graph below this fraction of its size to continue
MAX_SIZE_RATIO = 0.99

@dataclass
class LouvainConfig:
    max_depth: int = 100               # hard ceiling on recursion levels, whatever fold_count says
    max_size_ratio: float = MAX_SIZE_RATIO

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if not 0.0 < self.max_size_ratio <= 1.0:
            raise ValueError(f"max_size_ratio must lie in (0, 1], got {self.max_size_ratio}")

@dataclass
class EnsembleConfig:
    n_runs: int = 8
    max_workers: Optional[int] = None  # ThreadPoolExecutor default when None
    fold_count: int = -1               # -1 folds until convergence

    def __post_init__(self):
        if self.n_runs < 1:
            raise ValueError(f"n_runs must be at least 1, got {self.n_runs}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
