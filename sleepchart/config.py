import os

from dotenv import load_dotenv

load_dotenv()

# Smoothing window (in samples) applied to the heart rate line
SMOOTHING_WINDOW_SIZE = int(os.getenv("SMOOTHING_WINDOW_SIZE", "9"))

# X axis tick spacing
TICK_INTERVAL_MINUTES = int(os.getenv("TICK_INTERVAL_MINUTES", "15"))

# Timezone used to localize naive API timestamps and to align ticks
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")

# Heart rate domain used when there are no valid samples
HEART_RATE_FALLBACK_MIN = float(os.getenv("HEART_RATE_FALLBACK_MIN", "45"))
HEART_RATE_FALLBACK_MAX = float(os.getenv("HEART_RATE_FALLBACK_MAX", "100"))

# Heart rate axis: fixed floor, headroom above the highest smoothed value
HEART_RATE_AXIS_FLOOR = float(os.getenv("HEART_RATE_AXIS_FLOOR", "45"))
HEART_RATE_AXIS_PADDING = float(os.getenv("HEART_RATE_AXIS_PADDING", "5"))

# Resting heart rate history axis padding (both ends)
RESTING_HEART_RATE_PADDING = float(os.getenv("RESTING_HEART_RATE_PADDING", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Heart rate readings above this (in bpm) are treated as sensor errors
MAX_HEART_RATE_BPM = float(os.getenv("MAX_HEART_RATE_BPM", "1000"))
