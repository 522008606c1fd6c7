"""
Session Default Values
All hardcoded values should be defined here and accessed via Config.get()
These defaults can be overridden in config/session.py or in .env
"""

# ============================================================================
# TRANSPORT DEFAULTS
# ============================================================================

DEFAULT_SESSION_COOKIE_NAME = 'session'
DEFAULT_SESSION_HEADER_NAME = 'Session-ID'
DEFAULT_SESSION_DATA_COOKIE_NAME = 'session_data'  # cookie driver payload

# ============================================================================
# LIFECYCLE DEFAULTS
# ============================================================================

DEFAULT_SESSION_EXPIRE_AFTER_SECONDS = None  # never expires
DEFAULT_ACCESS_UPDATE_INTERVAL = 300  # seconds (5 minutes)
DEFAULT_SESSION_ID_LENGTH = 21
DEFAULT_EXCLUDED_PATHS = ['/health']
DEFAULT_EXCLUDED_USER_AGENTS = []

# ============================================================================
# STORE DEFAULTS
# ============================================================================

DEFAULT_SESSION_DRIVER = 'array'
DEFAULT_REDIS_URL = 'redis://localhost:6379/0'
DEFAULT_SESSION_KEY_PREFIX = 'session_'
DEFAULT_SESSION_FILES = 'storage/sessions'
DEFAULT_SESSION_LOTTERY = [2, 100]  # [chances, out_of] for garbage collection

# ============================================================================
# LOGGING DEFAULTS
# ============================================================================

DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_LOG_BACKUP_COUNT = 5
