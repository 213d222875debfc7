# schemas/common.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =====================================================================
# RESPONSE WRAPPERS
# =====================================================================

class ApiResponse(BaseModel):
    """Uniform response envelope: {success, message?, data?, error?}."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[Any] = None
