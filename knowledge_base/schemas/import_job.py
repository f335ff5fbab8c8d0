"""
Import job schemas
"""
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class ImportJobResponse(BaseModel):
    id: int
    created_by: int
    status: str
    file_name: str
    stats: Dict[str, int]
    errors: Optional[List[Dict[str, Any]]] = None
    started_at: Optional[datetime]
    created_at: Optional[datetime]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class ImportJobListResponse(BaseModel):
    data: List[ImportJobResponse]
    count: int
