DOMAIN = "hydride_monitor"

CONF_PRESSURE_SENSOR = "pressure_sensor"
CONF_TEMPERATURE_SENSOR = "temperature_sensor"
CONF_FALLBACK_TEMPERATURE = "fallback_temperature"
CONF_MAX_CAPACITY = "max_capacity_nl"
CONF_DISCHARGE_RATE = "discharge_rate_ml_per_min"

DEFAULT_FALLBACK_TEMPERATURE = 20.0  # °C - curve store midpoint
DEFAULT_MAX_CAPACITY = 450.0  # NL - reference cylinder
DEFAULT_DISCHARGE_RATE = 500.0  # mL/min

# Reading filter settings
CONF_READING_BUFFER_SIZE = "reading_buffer_size"
CONF_READING_DEBOUNCE_SECONDS = "reading_debounce_seconds"
DEFAULT_READING_BUFFER_SIZE = (
    5  # Number of readings to keep in buffer for median filter
)
DEFAULT_READING_DEBOUNCE_SECONDS = 30  # Minimum seconds between processing readings

SERVICE_ESTIMATE = "estimate"
ATTR_PRESSURE = "pressure"
ATTR_TEMPERATURE = "temperature"
ATTR_ENTRY_ID = "entry_id"

# Gauge psi to absolute MPa: p_abs = p_gauge * PSI_TO_MPA + ATMOSPHERIC_PRESSURE_MPA
PSI_TO_MPA = 0.00689476
ATMOSPHERIC_PRESSURE_MPA = 0.1

# Practical full-charge loading (mL/g), the desorption plateau.
# Sits below the curve maximum so a fully charged cylinder reads 100 %.
FULL_CHARGE_CONTENT = 170.0

# NL to mL for runtime against a discharge rate in mL/min
NL_TO_ML = 1000.0

# Lower bound (inclusive, %) of each status band
STATUS_FULL_PERCENT = 80.0
STATUS_NORMAL_PERCENT = 40.0
STATUS_LOW_PERCENT = 15.0
