# Utils package
from .paths import DATA_DIR, CAVES_REGISTRY_PATH, SETTINGS_PATH, CAVE_LOGS_DIR, app_path, cave_log_path
from .platform import current_platform, platform_ext
