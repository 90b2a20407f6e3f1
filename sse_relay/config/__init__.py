from .manager import ConfigManager
from .schemas import ConfigSchema
