from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire; both accepted on input."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
