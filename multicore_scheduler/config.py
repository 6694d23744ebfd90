"""
Simulator defaults.

The CLI uses these as argparse defaults; the engine only relies on the
core-count floor, the default priority and the power factor.
"""

# Core count accepted by the CLI and the interactive menu.
MIN_CORES = 1
MAX_CORES = 16
DEFAULT_CORES = 4

# Lower value means higher priority.
DEFAULT_PRIORITY = 128

# Static power cost per unit of burst time.
POWER_PER_BURST_UNIT = 0.1

DEFAULT_QUANTUM = 2

EXAMPLE_BURST_TIMES = (10, 5, 8, 3)
