# powerbudget/core/constants.py

MAX_CAPACITY = 100.0     # total system capacity, informational only
SAFE_CAPACITY = 92.0     # enforced ceiling on total consumption
DEVICE_MAX = 40.0        # hard per-device consumption cap

ENV_PREFIX = "POWER_"
