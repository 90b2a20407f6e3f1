from pydantic import Field
from .base import BaseConfigModel
from .server_config import ServerConfig
from .stream_config import StreamConfig
from .generator_config import GeneratorConfig
from .logging_config import LoggingConfig


class ConfigSchema(BaseConfigModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
