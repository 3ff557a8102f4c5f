from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class Schema(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Ingredient(Schema):
    id: str
    name: str = Field(..., json_schema_extra={"example": "Teff flour"})
    # string so "1/2" or "2-3" survive untouched
    amount: str = Field("", json_schema_extra={"example": "2"})
    unit: str = Field("", json_schema_extra={"example": "cups"})


class Step(Schema):
    id: str
    description: str
    image_url: Optional[str] = None


class Comment(Schema):
    id: str
    user_id: str
    user_name: str = ""
    user_avatar: str = ""
    text: str
    created_at: datetime
    recipe_id: str


class Category(Schema):
    """Filter key matched against a recipe's tags or region."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str


class Viewer(Schema):
    id: str
    name: str = ""
    avatar: str = ""


class RecipeDraft(Schema):
    """Authored content of a recipe before it is published."""

    title: str = Field(
        ..., min_length=1, json_schema_extra={"example": "Doro Wat"}
    )
    description: str = ""
    image_url: str = ""
    prep_time: int = Field(0, ge=0)
    cook_time: int = Field(0, ge=0)
    servings: int = Field(1, ge=1)
    difficulty: Difficulty = Difficulty.medium
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[Step] = Field(default_factory=list)
    region: Optional[str] = None
    tags: List[str] = Field(
        default_factory=list,
        json_schema_extra={"example": ["stew", "spicy"]},
    )

    @model_validator(mode="after")
    def check_unique_part_ids(self):
        for label, parts in (("ingredient", self.ingredients), ("step", self.steps)):
            ids = [p.id for p in parts]
            if len(ids) != len(set(ids)):
                raise ValueError(f"duplicate {label} id in recipe")
        return self


class Recipe(RecipeDraft):
    id: str
    author_id: str
    author_name: str = ""
    author_avatar: str = ""
    created_at: datetime

    likes: int = Field(0, ge=0)
    is_liked: bool = False
    is_saved: bool = False
    rating: float = Field(0.0, ge=0.0, le=5.0)
    rating_count: int = Field(0, ge=0)
    comments: List[Comment] = Field(default_factory=list)

    @model_validator(mode="after")
    def zero_rating_when_unrated(self):
        if self.rating_count == 0:
            self.rating = 0.0
        return self

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time


class RatingIn(Schema):
    value: float = Field(..., json_schema_extra={"example": 4})


class CommentIn(Schema):
    text: str
    # client-generated request id; re-sending the same id is a no-op
    id: Optional[str] = None
