from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal, List
from datetime import datetime

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for registration requests
class UserCreate(UserBase):
    name: str = Field(min_length=2)
    password: str = Field(min_length=8)

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str
    fullname: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Literal["admin", "member"]

class PageMeta(BaseModel):
    total: int
    page: int
    limit: int

class UsersPage(BaseModel):
    data: List[UserResponse]
    meta: PageMeta
