from typing import Optional

from pydantic import BaseModel


class IntakeResult(BaseModel):
    """Text extracted from an accepted upload."""
    file_name: str
    content_type: str
    text: str
    lossy: bool = False
    warning: Optional[str] = None
