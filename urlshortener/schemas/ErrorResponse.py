from typing import Optional

from pydantic import BaseModel

class ErrorResponse(BaseModel):
    error: str
    message: str
    reason: Optional[str] = None
