from pydantic import BaseModel
from typing import Optional

# Public identity bound to the browser session. Never carries the password hash.
class SessionUser(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True

# Form data echoed back into register/login templates after an error
class UserFormData(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
