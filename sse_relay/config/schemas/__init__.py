from .config_schema import ConfigSchema
from .server_config import ServerConfig
from .stream_config import StreamConfig
from .generator_config import GeneratorConfig
from .logging_config import LoggingConfig
