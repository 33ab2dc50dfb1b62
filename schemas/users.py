from typing import Annotated, List, Literal, Optional

from pydantic import Field, StringConstraints

from . import RequestSchema, limits

Skill = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=limits.SKILL_MAX)]
SkillList = List[Skill]
Bio = Annotated[str, StringConstraints(strip_whitespace=True, max_length=limits.BIO_MAX)]
Location = Annotated[str, StringConstraints(strip_whitespace=True, max_length=limits.LOCATION_MAX)]


class Availability(RequestSchema):
    weekends: bool = False
    evenings: bool = False
    weekdays: bool = False
    custom: Annotated[str, StringConstraints(strip_whitespace=True, max_length=limits.AVAILABILITY_CUSTOM_MAX)] = ''


class ProfileUpdateSchema(RequestSchema):
    """Partial update: only keys present in the body are applied"""

    name: Optional[Annotated[str, StringConstraints(
        strip_whitespace=True, min_length=limits.NAME_MIN, max_length=limits.NAME_MAX
    )]] = None
    bio: Optional[Bio] = None
    location: Optional[Location] = None
    skills_offered: Optional[SkillList] = None
    skills_wanted: Optional[SkillList] = None
    availability: Optional[Availability] = None
    profile_visibility: Optional[Literal['public', 'private']] = None
    profile_photo: Optional[str] = Field(None, max_length=limits.PHOTO_URL_MAX)

    def changes(self):
        data = self.model_dump(exclude_unset=True)
        # name, lists and visibility cannot be cleared, only replaced
        for key in ('name', 'skills_offered', 'skills_wanted', 'availability', 'profile_visibility'):
            if key in data and data[key] is None:
                data.pop(key)
        # availability is replaced whole, with defaults for omitted flags
        if 'availability' in data:
            data['availability'] = self.availability.model_dump()
        return data
