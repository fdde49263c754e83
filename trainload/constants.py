# trainload/constants.py

# --- Weight recommendation ---

WEIGHT_INCREMENT_KG = 2.5

# Working weight (kg) for 8 reps used when a user has too little history for an exercise
BASE_WEIGHT_TABLE_KG = {
    "bench-press": 80.0,
    "incline-bench-press": 65.0,
    "dumbbell-bench-press": 30.0,
    "squat": 100.0,
    "front-squat": 80.0,
    "leg-press": 150.0,
    "deadlift": 120.0,
    "romanian-deadlift": 90.0,
    "hip-thrust": 100.0,
    "overhead-press": 50.0,
    "dumbbell-shoulder-press": 20.0,
    "barbell-row": 70.0,
    "dumbbell-row": 30.0,
    "lat-pulldown": 60.0,
    "seated-cable-row": 60.0,
    "leg-curl": 40.0,
    "leg-extension": 50.0,
    "bicep-curl": 15.0,
    "tricep-extension": 20.0,
    "lateral-raise": 10.0,
    "calf-raise": 60.0,
}
DEFAULT_BASE_WEIGHT_KG = 20.0

BASELINE_REPS = 8
PER_REP_WEIGHT_ADJUSTMENT = 0.025  # 2.5% lighter per rep above the baseline
PER_RIR_WEIGHT_ADJUSTMENT = 0.025

HISTORY_LOG_LIMIT = 10
MIN_HISTORY_ENTRIES = 2

EPLEY_REP_DIVISOR = 30.0

# Fatigue modifier anchors: fatigue 0 -> 1.05, 50 -> 1.00, 100 -> 0.80
FATIGUE_MODIFIER_AT_ZERO = 1.05
FATIGUE_MODIFIER_AT_MIDPOINT = 1.00
FATIGUE_MODIFIER_AT_MAX = 0.80
FATIGUE_MIDPOINT = 50.0

# --- Fatigue snapshot ---

MIN_FATIGUE = 0.0
MAX_FATIGUE = 100.0

DEFAULT_CURRENT_FATIGUE = 30.0
DEFAULT_MUSCLE_GROUP_FATIGUE = {
    "chest": 30.0,
    "back": 25.0,
    "legs": 40.0,
    "shoulders": 20.0,
    "arms": 35.0,
    "core": 15.0,
}

# Workout intensity blend
VOLUME_SET_CAP = 20
TECHNIQUE_COUNT_CAP = 5
DURATION_CAP_MINUTES = 90.0
VOLUME_WEIGHT = 0.4
TECHNIQUE_WEIGHT = 0.4
DURATION_WEIGHT = 0.2

# Recovery per elapsed day and scaling of per-log muscle group contributions
GLOBAL_RECOVERY_PER_DAY = 10.0
MUSCLE_GROUP_RECOVERY_PER_DAY = 15.0
MUSCLE_GROUP_CONTRIBUTION_SCALE = 10.0

# Keys as written by the front end into workout_logs.completed_sets
TECHNIQUE_FLAGS = (
    "isDropSet",
    "isRestPause",
    "isMechanicalSet",
    "isPartialReps",
    "isGiantSet",
    "isMyoReps",
    "isPreFatigue",
    "isPostFatigue",
    "isIsometric",
)

RECOVERY_STATUS_THRESHOLDS = (
    (30.0, "excellent"),
    (50.0, "good"),
    (70.0, "moderate"),
)
READY_TO_TRAIN_BELOW = 80.0

# --- Exercise alternatives ---

MIN_RECOMMENDED_RIR = 0
MAX_RECOMMENDED_RIR = 4
