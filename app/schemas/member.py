from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

class MemberCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    image: Optional[str] = None

class MemberUpdate(BaseModel):
    # sólo cambian los campos enviados (exclude_unset)
    username: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    image: Optional[str] = None

class MemberOut(BaseModel):
    id: str
    username: str
    email: EmailStr
    image: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ImageUploadOut(BaseModel):
    url: str
    public_id: str
