from typing import Optional

from pydantic import BaseModel


class AccessCodeLogin(BaseModel):
    code: Optional[str] = None
