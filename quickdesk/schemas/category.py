"""Request/response schemas for ticket categories."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

CATEGORY_NAME_MIN_LENGTH = 2
CATEGORY_NAME_MAX_LENGTH = 50
CATEGORY_DESCRIPTION_MAX_LENGTH = 200
DEFAULT_CATEGORY_COLOR = "#1976d2"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    """Request body for POST /categories (admin only)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=CATEGORY_NAME_MIN_LENGTH,
        max_length=CATEGORY_NAME_MAX_LENGTH,
        description="Category name, unique case-insensitively.",
    )
    description: str = Field(default="", max_length=CATEGORY_DESCRIPTION_MAX_LENGTH)
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        pattern=COLOR_PATTERN,
        description="Hex RGB color, e.g. #1976d2.",
    )


class CategoryUpdate(BaseModel):
    """Request body for PUT /categories/{id}; omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(
        default=None,
        min_length=CATEGORY_NAME_MIN_LENGTH,
        max_length=CATEGORY_NAME_MAX_LENGTH,
    )
    description: str | None = Field(default=None, max_length=CATEGORY_DESCRIPTION_MAX_LENGTH)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    color: str
    created_at: datetime


class CategorySummary(BaseModel):
    """Category summary attached to tickets."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class CategoriesListResponse(BaseModel):
    categories: list[CategoryOut]
