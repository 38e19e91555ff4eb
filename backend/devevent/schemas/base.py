"""
Shared base for write schemas.

Pydantic errors are translated into the application's ValidationError so
callers only ever handle one error taxonomy.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from devevent.core.exceptions import ValidationError

# Required text: surrounding whitespace removed, must not be empty afterwards
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class InputSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, extra="ignore")

    @classmethod
    def parse(cls, data: Any):
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise ValidationError(
                f"Invalid value for {field}" if field else "Invalid input",
                detail=error["msg"],
                field=field,
            ) from e
