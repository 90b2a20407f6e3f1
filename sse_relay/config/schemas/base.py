import logging
from typing import Any, TypeVar, Type
from pydantic import BaseModel, ValidationError, ConfigDict

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseConfigModel")


class BaseConfigModel(BaseModel):
    """
    Base class for all configuration schemas.
    Provides a best-effort loading mechanism.
    """
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    @classmethod
    def load_best_effort(cls: Type[T], data: Any) -> T:
        """
        Create an instance from data by validating each field individually.
        Invalid fields are dropped and fall back to their default values.
        """
        if not isinstance(data, dict):
            return cls.model_validate({})

        valid_data = {}
        for field_name, field_info in cls.model_fields.items():
            if field_name not in data:
                continue

            val = data[field_name]

            # Nested sections repair themselves
            target_type = field_info.annotation
            if hasattr(target_type, "load_best_effort"):
                valid_data[field_name] = target_type.load_best_effort(val)
                continue

            # Validate the field alone, trusting defaults for the rest
            try:
                cls.model_validate({field_name: val})
                valid_data[field_name] = val
            except ValidationError:
                logger.warning(
                    f"[Config] Field '{cls.__name__}.{field_name}' is invalid. Using default."
                )

        return cls.model_validate(valid_data)
