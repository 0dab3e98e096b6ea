"""
Common schema configuration.

The API speaks camelCase JSON (creditTotal, errorCode, ...) while
Python code uses snake_case. Every schema inherits the alias
generator from ApiModel, and accepts either spelling on input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
