"""Solver constants used across ordering modules.

Centralizes the tuning defaults and clamping ranges of the annealer,
the batch controller and the random number generators.
"""

# ---------------------------------------------------------------------------
# Random number generation
# ---------------------------------------------------------------------------
SEED_MIX: int = 0x9E37_79B9
"""Golden-ratio constant used to mix seeds and chain indices."""

LCG_A: int = 1_664_525
"""Multiplier of the per-chain 32-bit linear congruential generator."""

LCG_C: int = 1_013_904_223
"""Increment of the per-chain 32-bit linear congruential generator."""

LCG64_A: int = 6_364_136_223_846_793_005
"""Multiplier of the 64-bit generator used for temperature sampling."""

SAMPLER_SEED_MIX: int = 0x9E37_79B9_7F4A_7C15
"""Mixed into the seed of the temperature sampler."""

U32_MASK: int = 0xFFFF_FFFF
U64_MASK: int = 0xFFFF_FFFF_FFFF_FFFF

INV_U32_MAX_PLUS1: float = 1.0 / 4_294_967_296.0
"""Scales a 32-bit draw into [0, 1)."""

# ---------------------------------------------------------------------------
# Annealing
# ---------------------------------------------------------------------------
MIN_TEMPERATURE: float = 0.001
"""Temperature at or below which uphill moves are never accepted."""

MAX_TEMPERATURE: float = 100_000.0
"""Upper clamp for configured and estimated temperatures."""

DEFAULT_COOLING: float = 0.995
"""Initial per-iteration multiplicative cooling rate."""

COOLING_MIN: float = 0.90
COOLING_MAX: float = 0.9999

DEFAULT_COOLING_ADJUST: float = 0.002
"""Step by which adaptive cooling nudges the cooling rate."""

COOLING_ADJUST_MIN: float = 0.0001
COOLING_ADJUST_MAX: float = 0.05

DEFAULT_TARGET_ACCEPTANCE: float = 0.3
"""Acceptance ratio the adaptive cooling tries to hold."""

TARGET_ACCEPTANCE_MIN: float = 0.05
TARGET_ACCEPTANCE_MAX: float = 0.95

ACCEPTANCE_BAND: float = 0.05
"""Half-width of the acceptance band around the target."""

ACCEPTANCE_WINDOW: int = 32
"""Iterations per rolling acceptance measurement."""

FLOOR_FRACTION: float = 0.25
"""Reheated chains keep at least this fraction of the reheat temperature."""

# ---------------------------------------------------------------------------
# Reheating / reseeding
# ---------------------------------------------------------------------------
RESEED_PLATEAU_STEPS: int = 12_000
"""Iterations without a personal best before a chain may be reseeded."""

# ---------------------------------------------------------------------------
# Batch sizing
# ---------------------------------------------------------------------------
DEFAULT_STEPS: int = 1_000
MIN_STEPS: int = 1
MAX_STEPS: int = 20_000

MIN_BATCH_SIZE: int = 1
MAX_BATCH_SIZE: int = 256

MAX_TOTAL_NODES: int = 200_000
"""Budget of chain lanes times nodes held in memory at once."""

TARGET_MS: float = 60.0
"""Wall-clock target for one batch."""

CONTROLLER_DEAD_BAND: tuple[float, float] = (0.9, 1.1)
"""target/elapsed ratios inside this band leave the step count unchanged."""

CONTROLLER_FACTOR_RANGE: tuple[float, float] = (0.5, 2.0)
"""Clamp on the multiplicative step/batch adjustment."""

STOP_AFTER_PLATEAU_MS: float = 10_000.0
"""Accumulated batch time without improvement after which callers stop."""

# ---------------------------------------------------------------------------
# Temperature estimation
# ---------------------------------------------------------------------------
MIN_TEMPERATURE_SAMPLES: int = 8
MAX_TEMPERATURE_SAMPLES: int = 64
MIN_ESTIMATED_TEMPERATURE: float = 0.1

# ---------------------------------------------------------------------------
# Random permutation sampling
# ---------------------------------------------------------------------------
DEFAULT_SAMPLE_BATCH: int = 512
