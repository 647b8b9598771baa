# === Central Hyperparameter Definition ===
# Defaults used by PSO_ENGINE.PSO.Config.Config and the example CLI in main.py

# --- Problem Config ---
DEFAULT_DIMENSIONS = (2,)
DEFAULT_BOUNDS = (-5.0, 5.0)  # Repeated once per flattened dimension
SWARM_SIZE = 30
T_MAX = 10000  # Objective-function evaluations, not iterations

# --- Velocity Update Config ---
INERTIA_WEIGHT = 0.8
COGNITIVE_COEFF = 1.5
SOCIAL_COEFF = 1.5
V_CLAMP_RATIO = 0.2  # Fraction of each bound's width used as v_max
USE_CONSTRICTION = False

# --- Topology Config ---
NEIGHBORHOOD = "gbest"  # 'gbest' or 'lbest'
RHO = 1  # Ring neighbors on each side for 'lbest'

# --- Boundary Config ---
BOUNDARY_POLICY = "saturate"  # 'saturate', 'reflect' or 'clip'

# --- Evaluation Config ---
WORKERS = None  # None -> os.cpu_count(), 1 -> serial
# Threads only run in parallel when the objective releases the GIL (numpy, native code).
# Use "process" for CPU-bound pure-Python objectives; they must be picklable (module-level).
EXECUTOR = "thread"  # 'thread' or 'process'

# --- Reporting Config ---
SHOW_PROGRESS = False
PROGRESS_EVERY = 1  # Rounds between progress lines when SHOW_PROGRESS is on

# --- Termination Helpers ---
STAGNATION_PATIENCE = 50
STAGNATION_TOLERANCE = 1e-8

# --- Plotting Config ---
FIGURES_DIR = "Figures/"
