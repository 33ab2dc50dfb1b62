from typing import Annotated, Literal, Optional

from pydantic import Field, StringConstraints

from . import RequestSchema, limits

SwapSkill = Annotated[str, StringConstraints(
    strip_whitespace=True, min_length=limits.SWAP_SKILL_MIN, max_length=limits.SKILL_MAX
)]


class SwapRequestCreateSchema(RequestSchema):
    recipient_id: str = Field(..., min_length=1)
    requested_skill: SwapSkill
    offered_skill: SwapSkill
    message: Annotated[str, StringConstraints(
        strip_whitespace=True, min_length=limits.SWAP_MESSAGE_MIN, max_length=limits.SWAP_MESSAGE_MAX
    )]


class CancelSchema(RequestSchema):
    reason: Optional[Annotated[str, StringConstraints(
        strip_whitespace=True, min_length=limits.CANCEL_REASON_MIN, max_length=limits.CANCEL_REASON_MAX
    )]] = None


class ReportSchema(RequestSchema):
    reason: Literal['inappropriate', 'spam', 'fake_profile', 'no_show', 'other']
    details: Optional[Annotated[str, StringConstraints(
        strip_whitespace=True, max_length=limits.REPORT_DETAILS_MAX
    )]] = None
