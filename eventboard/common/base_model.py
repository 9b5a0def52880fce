"""
Shared pydantic base for records exchanged over the API.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    snake_case attributes, camelCase keys on the wire and on disk.

    Unknown keys are dropped on validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
