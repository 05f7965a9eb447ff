from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from models import ProjectStatus, BidStatus


# ------- Projects -------
class ProjectCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = Field(None, alias="categoryId")

    class Config:
        extra = "forbid"
        populate_by_name = True


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = Field(None, alias="categoryId")

    class Config:
        extra = "forbid"
        populate_by_name = True

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        # Omitting title leaves it alone; an explicit null would clear it
        if v is None:
            raise ValueError("title must be a non-empty string")
        return v


class ProjectResponse(BaseModel):
    id: int
    customer_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    status: ProjectStatus
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    success: bool = True
    items: List[ProjectResponse] = []


# Admin override of the lifecycle
class StatusOverride(BaseModel):
    status: ProjectStatus

    class Config:
        extra = "forbid"


# ------- Bids -------
class BidCreate(BaseModel):
    price: float = Field(..., allow_inf_nan=False)
    days: int = Field(..., ge=1)
    message: Optional[str] = None

    class Config:
        extra = "forbid"


class BidResponse(BaseModel):
    id: int
    project_id: int
    merchant_id: int
    price: float
    days: int
    message: Optional[str] = None
    status: BidStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BidListResponse(BaseModel):
    success: bool = True
    items: List[BidResponse] = []


# ------- Notifications -------
class NotificationCreate(BaseModel):
    type: str = Field(..., min_length=1)
    user_id: Optional[int] = None
    role: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    data: Optional[dict] = None

    class Config:
        extra = "forbid"


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    role: Optional[str] = None
    type: str
    title: Optional[str] = None
    message: Optional[str] = None
    data: Optional[dict] = None
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ------- Generic acknowledgement -------
class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ProjectStatusResponse(SuccessResponse):
    project: ProjectResponse
