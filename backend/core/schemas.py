# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic base models shared by the feature routers."""

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON keys are camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FormModel(CamelModel):
    """
    Request body whose ``validate_default`` fields are filled in with their
    blank default when absent.  Their validators then run on the wire name,
    so a missing field is reported under the same key as an invalid one.
    """

    @model_validator(mode="before")
    @classmethod
    def _fill_blanks(cls, data):
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        for name, info in cls.model_fields.items():
            alias = info.alias or name
            if info.validate_default and alias not in filled and name not in filled:
                filled[alias] = info.get_default(call_default_factory=True)
        return filled
