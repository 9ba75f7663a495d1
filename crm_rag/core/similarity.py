"""
Cosine similarity scoring.

Pure numeric comparison between a query vector and a chunk vector. Never
raises for finite-length inputs: vectors of different length are treated as
incomparable and score 0.0, so a chunk embedded with an older model cannot
break a query made with a newly configured one.

Dependencies: numpy
System role: SimilarityScorer
"""

import math
from typing import Sequence

import numpy as np

VectorLike = Sequence[float] | np.ndarray


def as_vector(values: VectorLike) -> np.ndarray:
    """Convert a sequence of numbers to a 1-D float64 array."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        float: dot(a, b) / (|a| * |b|) in [-1.0, 1.0]; 0.0 when the lengths
        differ, when either vector is all zeros, or when the inputs are not
        finite
    """
    va = as_vector(a)
    vb = as_vector(b)

    if va.shape != vb.shape:
        return 0.0

    scale_a = float(np.max(np.abs(va))) if va.size else 0.0
    scale_b = float(np.max(np.abs(vb))) if vb.size else 0.0
    if scale_a == 0.0 or scale_b == 0.0:
        return 0.0

    # unit max-abs keeps the squared norms clear of float underflow
    va = va / scale_a
    vb = vb / scale_b

    dot = float(np.dot(va, vb))
    norm_a = float(np.dot(va, va))
    norm_b = float(np.dot(vb, vb))

    # sqrt of the product keeps sim(v, v) exactly 1.0
    denominator = math.sqrt(norm_a * norm_b)
    if denominator == 0.0 or not math.isfinite(denominator) or not math.isfinite(dot):
        return 0.0

    score = dot / denominator
    return max(-1.0, min(1.0, score))
