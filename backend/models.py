from pydantic import BaseModel
from typing import Dict, Any, Optional


class Credentials(BaseModel):
    username: str
    password: str


class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None


class AnalysisResponse(BaseModel):
    success: bool = True
    analysis: Dict[str, Any]
    remainingTries: Optional[int] = None
