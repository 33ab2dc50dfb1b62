from typing import Annotated, Optional

from pydantic import Field, StringConstraints

from . import RequestSchema, limits

Comment = Annotated[str, StringConstraints(
    strip_whitespace=True, min_length=limits.RATING_COMMENT_MIN, max_length=limits.RATING_COMMENT_MAX
)]


class RatingCreateSchema(RequestSchema):
    to_user: str = Field(..., min_length=1)
    swap_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=limits.RATING_MIN, le=limits.RATING_MAX)
    comment: Optional[Comment] = None


class RatingUpdateSchema(RequestSchema):
    rating: Optional[int] = Field(None, ge=limits.RATING_MIN, le=limits.RATING_MAX)
    comment: Optional[Comment] = None
