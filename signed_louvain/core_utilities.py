"""
Core utilities for the Signed Louvain framework.
Contains shared utility classes and functions used across modules.
"""
import time
from collections import defaultdict

import numpy as np


class TimingStats:
    """Utility class to track timing statistics for different operations"""
    def __init__(self):
        self.stats = defaultdict(list)
        self.current_timers = {}

    def start(self, operation):
        """Start timing an operation"""
        self.current_timers[operation] = time.perf_counter()

    def end(self, operation):
        """End timing an operation and record the elapsed time"""
        if operation in self.current_timers:
            elapsed = time.perf_counter() - self.current_timers.pop(operation)
            self.stats[operation].append(elapsed)
            return elapsed
        return None

    def get_stats(self, as_dict=False):
        """Get statistics for all operations"""
        result = {}
        for op, times in self.stats.items():
            result[op] = {
                'count': len(times),
                'total': sum(times),
                'mean': sum(times) / len(times) if times else 0,
                'min': min(times) if times else 0,
                'max': max(times) if times else 0
            }

        if as_dict:
            return result

        lines = ["Detailed Timing Statistics:"]
        # Sort by total time in descending order
        for op, stats in sorted(result.items(), key=lambda x: x[1]['total'], reverse=True):
            lines.append(f"  • {op}: {stats['total']:.4f}s total, "
                        f"{stats['count']} calls, "
                        f"{stats['mean']:.4f}s avg/call")
        return "\n".join(lines)


class ScoreStats:
    """
    Tracks objective scores of an ensemble in an online fashion.
    Tracks count, mean, variance, min, and max.
    """
    def __init__(self):
        self.count = 0
        self.mean = 0.0
        self.M2 = 0.0  # For variance calculation
        self.min_val = float('inf')
        self.max_val = float('-inf')

    def update(self, value):
        """
        Add a single score (Welford's update)

        Parameters:
        -----------
        value : float
            Objective value of one run
        """
        value = float(value)
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.M2 += delta * (value - self.mean)
        self.min_val = min(self.min_val, value)
        self.max_val = max(self.max_val, value)

    def get_variance(self):
        """Get the current variance"""
        if self.count < 2:
            return 0.0
        return self.M2 / self.count

    def get_std(self):
        """Get the current standard deviation"""
        return float(np.sqrt(self.get_variance()))

    def get_stats(self):
        """Get all statistics as a dictionary"""
        return {
            'count': self.count,
            'mean': self.mean,
            'variance': self.get_variance(),
            'std': self.get_std(),
            'min': self.min_val if self.count > 0 else None,
            'max': self.max_val if self.count > 0 else None
        }


def ramp(size):
    """Identity partition 0..size-1, each node in its own group."""
    return np.arange(size, dtype=np.int64)


def reindex_consecutive(labels):
    """Map arbitrary non-negative labels to 0..k-1, preserving their sorted order."""
    labels = np.asarray(labels, dtype=np.int64)
    if labels.size == 0:
        return labels.copy()
    _, new = np.unique(labels, return_inverse=True)
    return new.astype(np.int64).ravel()


def validate_partition(partition, n_nodes):
    """
    Check a partition against a node count and return an owned int64 copy.

    Parameters:
    -----------
    partition : array-like
        Group id per node
    n_nodes : int
        Number of nodes the partition must cover

    Returns:
    --------
    numpy.ndarray
        A fresh int64 array with the same values

    Raises:
    -------
    ValueError
        If the length differs from n_nodes, the array is not one-dimensional,
        holds non-integer values, or has ids outside [0, n_nodes)
    """
    arr = np.asarray(partition)
    if arr.ndim != 1:
        raise ValueError(f"Partition must be one-dimensional, got shape {arr.shape}")
    if arr.shape[0] != n_nodes:
        raise ValueError(
            f"Partition length {arr.shape[0]} does not match node count {n_nodes}"
        )
    if arr.size == 0:
        return np.zeros(0, dtype=np.int64)
    if not np.issubdtype(arr.dtype, np.integer):
        if not np.all(np.equal(np.mod(arr, 1), 0)):
            raise ValueError("Partition values must be integers")
    arr = np.array(arr, dtype=np.int64, copy=True)
    low, high = int(arr.min()), int(arr.max())
    if low < 0 or high >= n_nodes:
        raise ValueError(
            f"Partition values must lie in [0, {n_nodes}), got range [{low}, {high}]"
        )
    return arr
