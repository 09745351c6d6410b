"""
Request bodies for user management.

Credentials are managed by the external identity provider; these models
only cover the profile stored by the API.
"""

from typing import Optional

from .common import CamelModel


class UserCreate(CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    credits: Optional[float] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    credits: Optional[float] = None
    is_active: Optional[bool] = None
