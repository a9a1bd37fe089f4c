"""
Common Schemas - Response envelope pieces shared by every router
"""

from pydantic import BaseModel

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)

class MessageResponse(BaseModel):
    """Envelope without a payload (deletes, logout-style acknowledgements)"""
    success: bool = True
    message: str
