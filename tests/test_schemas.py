"""Request schema bounds and normalisation."""

import pytest

from schemas import load
from schemas.auth import RegisterSchema
from schemas.ratings import RatingCreateSchema, RatingUpdateSchema
from schemas.swaps import CancelSchema, SwapRequestCreateSchema
from schemas.users import ProfileUpdateSchema
from utils.errors import ValidationError


class TestLoad:

    def test_none_body_is_empty_object(self):
        with pytest.raises(ValidationError) as exc_info:
            load(RegisterSchema, None)
        assert {'name', 'email', 'password'} <= set(exc_info.value.details)

    def test_non_object_body(self):
        with pytest.raises(ValidationError) as exc_info:
            load(RegisterSchema, 'alice')
        assert exc_info.value.message == 'Request body must be a JSON object'

    def test_camel_and_snake_case_keys(self):
        camel = load(RatingCreateSchema, {'toUser': 'u1', 'swapId': 's1', 'rating': 4})
        snake = load(RatingCreateSchema, {'to_user': 'u1', 'swap_id': 's1', 'rating': 4})
        assert camel == snake

    def test_unknown_keys_are_ignored(self):
        payload = load(ProfileUpdateSchema, {'bio': 'Hi', 'role': 'admin', 'rating': 5})
        assert payload.changes() == {'bio': 'Hi'}


class TestRegisterSchema:

    def test_normalises_email_and_strips_skills(self):
        payload = load(RegisterSchema, {
            'name': '  Alice  ',
            'email': 'Alice@Example.com',
            'password': 'secret123',
            'skillsOffered': [' Guitar '],
        })
        assert payload.name == 'Alice'
        assert payload.email == 'alice@example.com'
        assert payload.skills_offered == ['Guitar']
        assert payload.skills_wanted == []

    @pytest.mark.parametrize('field, value', [
        ('name', 'A'),
        ('name', 'x' * 51),
        ('password', '12345'),
        ('bio', 'x' * 501),
        ('location', 'x' * 101),
        ('skillsOffered', ['x' * 51]),
    ])
    def test_bounds(self, field, value):
        data = {'name': 'Alice', 'email': 'alice@example.com', 'password': 'secret123', field: value}
        with pytest.raises(ValidationError):
            load(RegisterSchema, data)


class TestSwapSchemas:

    def test_message_bounds(self):
        base = {'recipientId': 'u1', 'requestedSkill': 'Guitar', 'offeredSkill': 'Cooking'}
        load(SwapRequestCreateSchema, {**base, 'message': 'x' * 10})
        load(SwapRequestCreateSchema, {**base, 'message': 'x' * 1000})
        for message in ('x' * 9, 'x' * 1001):
            with pytest.raises(ValidationError):
                load(SwapRequestCreateSchema, {**base, 'message': message})

    def test_cancel_reason_is_optional_but_bounded(self):
        assert load(CancelSchema, {}).reason is None
        with pytest.raises(ValidationError):
            load(CancelSchema, {'reason': 'no'})


class TestRatingSchemas:

    @pytest.mark.parametrize('score', [0, 6])
    def test_score_range(self, score):
        with pytest.raises(ValidationError):
            load(RatingCreateSchema, {'toUser': 'u1', 'swapId': 's1', 'rating': score})

    def test_comment_bounds(self):
        with pytest.raises(ValidationError):
            load(RatingUpdateSchema, {'comment': 'too short'})
        assert load(RatingUpdateSchema, {'comment': 'Long enough comment'}).rating is None


class TestProfileUpdateSchema:

    def test_only_present_keys_change(self):
        assert load(ProfileUpdateSchema, {'location': 'Delhi'}).changes() == {'location': 'Delhi'}

    def test_name_cannot_be_cleared(self):
        assert load(ProfileUpdateSchema, {'name': None}).changes() == {}

    def test_bio_can_be_cleared(self):
        assert load(ProfileUpdateSchema, {'bio': None}).changes() == {'bio': None}

    def test_availability_is_replaced_whole(self):
        changes = load(ProfileUpdateSchema, {'availability': {'evenings': True}}).changes()
        assert changes['availability'] == {
            'weekends': False, 'evenings': True, 'weekdays': False, 'custom': '',
        }
