"""
Admin schemas
"""
from pydantic import BaseModel
from typing import Dict


class CleanupRequest(BaseModel):
    delete_categories: bool = False


class CleanupResponse(BaseModel):
    success: bool
    deleted: Dict[str, int]
    remaining: Dict[str, int]
