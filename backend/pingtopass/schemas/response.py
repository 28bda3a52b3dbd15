# backend/pingtopass/schemas/response.py
from pydantic import BaseModel
from typing import Generic, TypeVar, Optional

T = TypeVar('T')
class StandardResponse(BaseModel, Generic[T]):
    """Standard response model

    Common envelope for API responses: status code, message and payload.

    Attributes:
        code: status code, 200 on success
        message: 'success' on success
        data: payload, generic and optional
    """
    code: int = 200
    message: str = 'success'
    data: Optional[T]
