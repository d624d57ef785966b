"""
Uniform error envelope returned for every failed request.
"""

from typing import Optional

from eventaro.schemas.base import CamelModel


class ErrorResponse(CamelModel):
    status_code: int
    message: str
    error: Optional[str] = None
