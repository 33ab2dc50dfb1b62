from typing import Annotated, Literal

from pydantic import StringConstraints

from . import RequestSchema, limits


class StatusUpdateSchema(RequestSchema):
    status: Literal['active', 'banned', 'suspended']


class RoleUpdateSchema(RequestSchema):
    role: Literal['user', 'admin']


class AnnouncementSchema(RequestSchema):
    title: Annotated[str, StringConstraints(
        strip_whitespace=True,
        min_length=limits.ANNOUNCEMENT_TITLE_MIN,
        max_length=limits.ANNOUNCEMENT_TITLE_MAX,
    )]
    message: Annotated[str, StringConstraints(
        strip_whitespace=True,
        min_length=limits.ANNOUNCEMENT_MESSAGE_MIN,
        max_length=limits.ANNOUNCEMENT_MESSAGE_MAX,
    )]
    type: Literal['info', 'warning', 'success', 'error'] = 'info'
