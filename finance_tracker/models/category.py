from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from finance_tracker.db.core import CategoryType

# ===== CATEGORY PYDANTIC MODELS =====

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
DEFAULT_CATEGORY_COLOR = "#6B7280"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name, unique per user")
    color: str = Field(DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN, description="Hex color code")
    icon: Optional[str] = Field(None, max_length=50, description="Icon identifier for the UI")
    category_type: CategoryType = Field(..., description="INCOME or EXPENSE")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)
    category_type: Optional[CategoryType] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class CategoryResponse(CategoryBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategorySetupResponse(BaseModel):
    message: str
    categories: list[CategoryResponse] = Field(default_factory=list)
