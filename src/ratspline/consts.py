"""Central module containing numeric constants"""

from __future__ import annotations

# Segment count from which uniform sampling switches from a pure Python loop
# to vectorized numpy evaluation.
NUMPY_SAMPLING_THRESHOLD: int = 70

# Chord tolerance used when a caller asks for an approximation without one.
DEFAULT_MAX_ERROR: float = 1.0e-3

# Tolerances for approx_equal comparisons.
DEFAULT_RTOL: float = 1.0e-9
DEFAULT_ATOL: float = 1.0e-9

# Squared norm below which a derivative counts as zero.
ZERO_LENGTH_EPS: float = 1.0e-24

# Upper limit for the number of line segments of one approximated curve.
MAX_APPROXIMATION_SEGMENTS: int = 100_000
