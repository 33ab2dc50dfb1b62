import logging
from flask import request
from flask_restful import Resource

from middleware.auth import token_required, optional_auth, current_user
from schemas import load
from schemas.users import ProfileUpdateSchema
from services import identity
from utils.cache import CacheManager, CACHE_TTL_SHORT, build_browse_cache_key
from utils.response import success_response, paginated_response, pagination_args, handle_errors

logger = logging.getLogger(__name__)


class UserListResource(Resource):
    """Public directory of active users with public profiles"""

    @optional_auth
    @handle_errors("Failed to fetch users")
    def get(self):
        page, per_page = pagination_args()
        skill = request.args.get('skill', '').strip() or None
        location = request.args.get('location', '').strip() or None
        search = request.args.get('search', '').strip() or None

        cache_key = build_browse_cache_key(page, per_page, skill, location, search)
        cached_result = CacheManager.get(cache_key)
        if cached_result is not None:
            logger.debug("Cache HIT for user directory page %s", page)
            return paginated_response(
                cached_result['users'], cached_result['total'], page, per_page
            )

        result = identity.browse_query(skill, location, search).paginate(
            page=page, per_page=per_page, error_out=False
        )
        users = [user.to_public_dict() for user in result.items]

        CacheManager.set(cache_key, {'users': users, 'total': result.total}, ttl=CACHE_TTL_SHORT)
        return paginated_response(users, result.total, page, per_page)


class UserStatsResource(Resource):

    @token_required
    @handle_errors("Failed to fetch user statistics")
    def get(self):
        return success_response(identity.stats(), "User statistics retrieved")


class UserProfileResource(Resource):
    """View or edit a single profile"""

    @optional_auth
    @handle_errors("Failed to fetch profile")
    def get(self, user_id):
        data = identity.view_profile(current_user(), user_id)
        return success_response(data, "User profile retrieved")

    @token_required
    @handle_errors("Failed to update profile")
    def put(self, user_id):
        """Update a profile; only the keys present in the body change"""
        payload = load(ProfileUpdateSchema, request.get_json(silent=True))
        user = identity.update_profile(current_user(), user_id, payload.changes())
        caller = current_user()
        data = user.to_admin_dict() if caller.is_admin else user.to_private_dict()
        return success_response(data, "Profile updated successfully")

    def patch(self, user_id):
        # PATCH uses the same logic as PUT for partial updates
        return self.put(user_id)
