"""State machine and pending-uniqueness rules for swap requests."""

import pytest
from sqlalchemy.exc import IntegrityError

from models import db, User, SwapRequest
from services import swaps
from utils.errors import (
    DuplicatePendingRequest,
    Forbidden,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)


def _reload(swap_id):
    db.session.expire_all()
    return db.session.get(SwapRequest, swap_id)


class TestCreateRequest:

    def test_creates_pending_request(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        assert swap.status == 'pending'
        assert swap.requester_id == alice.id
        assert swap.recipient_id == bob.id
        assert swap.accepted_at is None

    def test_rejects_request_to_self(self, make_user, make_swap):
        alice = make_user()
        with pytest.raises(ValidationError):
            make_swap(alice, alice)

    def test_unknown_recipient(self, make_user, make_swap):
        alice = make_user()
        ghost = User(id='missing-user')
        with pytest.raises(NotFound):
            make_swap(alice, ghost)

    def test_inactive_recipient(self, make_user, make_swap):
        alice = make_user()
        banned = make_user(status='banned')
        with pytest.raises(ValidationError):
            make_swap(alice, banned)

    def test_private_recipient(self, make_user, make_swap):
        alice = make_user()
        hidden = make_user(profile_visibility='private')
        with pytest.raises(Forbidden):
            make_swap(alice, hidden)

    def test_duplicate_pending_same_direction(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        make_swap(alice, bob)
        with pytest.raises(DuplicatePendingRequest):
            make_swap(alice, bob, requested_skill='Piano')
        assert SwapRequest.query.count() == 1

    def test_duplicate_pending_reverse_direction_is_symmetric(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        make_swap(alice, bob)
        with pytest.raises(DuplicatePendingRequest):
            make_swap(bob, alice)

    def test_directional_scope_allows_reverse_request(self, app, make_user, make_swap):
        app.config['PENDING_REQUEST_SCOPE'] = 'directional'
        alice, bob = make_user(), make_user()
        make_swap(alice, bob)
        make_swap(bob, alice)

        with pytest.raises(DuplicatePendingRequest):
            make_swap(alice, bob)
        assert SwapRequest.query.count() == 2

    def test_new_request_allowed_once_previous_settles(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        first = make_swap(alice, bob)
        swaps.reject(bob, first.id)

        second = make_swap(alice, bob)
        assert second.status == 'pending'
        assert second.id != first.id

    def test_partial_unique_index_rejects_second_pending_row(self, make_user):
        alice, bob = make_user(), make_user()
        key = swaps.pair_key(alice.id, bob.id)
        for _ in range(2):
            db.session.add(SwapRequest(
                requester_id=alice.id, recipient_id=bob.id, requested_skill='Guitar',
                offered_skill='Cooking', message='Let us trade skills!', pair_key=key,
            ))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_pair_key_scopes(self):
        assert swaps.pair_key('b', 'a', 'symmetric') == swaps.pair_key('a', 'b', 'symmetric')
        assert swaps.pair_key('b', 'a', 'directional') != swaps.pair_key('a', 'b', 'directional')


class TestTransitions:

    def test_accept_then_complete(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        swap = swaps.accept(bob, swap.id)
        assert swap.status == 'accepted'
        assert swap.accepted_at is not None

        swap = swaps.complete(alice, swap.id)
        assert swap.status == 'completed'
        assert swap.completed_at is not None
        assert swap.duration_in_days >= 0

    def test_complete_increments_both_swap_counts(self, completed_swap):
        db.session.expire_all()
        assert db.session.get(User, completed_swap.requester.id).swap_count == 1
        assert db.session.get(User, completed_swap.recipient.id).swap_count == 1

    def test_double_complete_is_rejected_and_counts_unchanged(self, completed_swap):
        with pytest.raises(InvalidStateTransition):
            swaps.complete(completed_swap.recipient, completed_swap.swap.id)

        db.session.expire_all()
        assert db.session.get(User, completed_swap.requester.id).swap_count == 1
        assert db.session.get(User, completed_swap.recipient.id).swap_count == 1

    def test_only_recipient_may_accept(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        with pytest.raises(Forbidden):
            swaps.accept(alice, swap.id)
        assert _reload(swap.id).status == 'pending'

    def test_only_recipient_may_reject(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        with pytest.raises(Forbidden):
            swaps.reject(alice, swap.id)
        assert swaps.reject(bob, swap.id).status == 'rejected'

    def test_stranger_cannot_cancel_or_complete(self, make_user, make_swap):
        alice, bob, eve = make_user(), make_user(), make_user()
        swap = make_swap(alice, bob)

        with pytest.raises(Forbidden):
            swaps.cancel(eve, swap.id)
        swaps.accept(bob, swap.id)
        with pytest.raises(Forbidden):
            swaps.complete(eve, swap.id)
        assert _reload(swap.id).status == 'accepted'

    def test_cannot_complete_pending(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        with pytest.raises(InvalidStateTransition) as exc_info:
            swaps.complete(alice, swap.id)
        assert exc_info.value.details['status'] == 'pending'
        assert _reload(swap.id).completed_at is None

    def test_cannot_accept_twice(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)
        swaps.accept(bob, swap.id)

        with pytest.raises(InvalidStateTransition):
            swaps.accept(bob, swap.id)

    def test_cancel_pending_records_who_and_why(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        swap = swaps.cancel(alice, swap.id, 'Schedule changed')
        assert swap.status == 'cancelled'
        assert swap.cancelled_by == alice.id
        assert swap.cancellation_reason == 'Schedule changed'
        assert swap.cancelled_at is not None

    def test_cancel_accepted_by_recipient(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)
        swaps.accept(bob, swap.id)

        assert swaps.cancel(bob, swap.id).status == 'cancelled'

    @pytest.mark.parametrize('action', ['accept', 'reject', 'cancel', 'complete'])
    def test_terminal_states_reject_every_action(self, make_user, make_swap, action):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)
        swaps.reject(bob, swap.id)

        with pytest.raises(InvalidStateTransition):
            getattr(swaps, action)(bob, swap.id)
        assert _reload(swap.id).status == 'rejected'

    def test_unknown_swap(self, make_user):
        with pytest.raises(NotFound):
            swaps.accept(make_user(), 'does-not-exist')


class TestDeleteAndReport:

    def test_requester_deletes_pending(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        swaps.delete_request(alice, swap.id)
        assert SwapRequest.query.count() == 0

    def test_recipient_cannot_delete(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        with pytest.raises(Forbidden):
            swaps.delete_request(bob, swap.id)

    def test_cannot_delete_accepted(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)
        swaps.accept(bob, swap.id)

        with pytest.raises(InvalidStateTransition):
            swaps.delete_request(alice, swap.id)
        assert SwapRequest.query.count() == 1

    def test_report_flags_without_changing_status(self, make_user, make_swap):
        alice, bob = make_user(), make_user()
        swap = make_swap(alice, bob)

        swap = swaps.report(bob, swap.id, 'spam', 'Copy-pasted to everyone')
        assert swap.is_reported is True
        assert swap.report_reason == 'spam'
        assert swap.reported_by == bob.id
        assert swap.status == 'pending'


class TestListing:

    def test_list_by_type_and_status(self, make_user, make_swap):
        alice, bob, carol = make_user(), make_user(), make_user()
        sent = make_swap(alice, bob)
        received = make_swap(carol, alice)
        swaps.accept(alice, received.id)

        assert [s.id for s in swaps.list_requests(alice, 'sent')] == [sent.id]
        assert [s.id for s in swaps.list_requests(alice, 'received')] == [received.id]
        assert {s.id for s in swaps.list_requests(alice)} == {sent.id, received.id}
        assert [s.id for s in swaps.list_requests(alice, 'all', 'accepted')] == [received.id]

    def test_invalid_type(self, make_user):
        with pytest.raises(ValidationError):
            swaps.list_requests(make_user(), 'everything')

    def test_view_limited_to_parties_and_admins(self, make_user, make_swap):
        alice, bob, eve = make_user(), make_user(), make_user()
        admin = make_user(role='admin')
        swap = make_swap(alice, bob)

        assert swaps.view_request(bob, swap.id).id == swap.id
        assert swaps.view_request(admin, swap.id).id == swap.id
        with pytest.raises(Forbidden):
            swaps.view_request(eve, swap.id)
