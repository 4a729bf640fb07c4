# --- Pydantic Models ---
from pydantic import BaseModel
from typing import Any, Optional


class ScoreUpdateRequest(BaseModel):
    # Loosely typed so wrong types get the same 400 messages as missing values
    username: Optional[Any] = None
    level: Optional[Any] = None
    profilePicture: Optional[str] = None
