import logging
from flask import request
from flask_restful import Resource

from middleware.admin import admin_required
from middleware.auth import token_required, current_user
from schemas import load
from schemas.admin import StatusUpdateSchema, RoleUpdateSchema, AnnouncementSchema
from services import identity, moderation, ratings
from utils.response import success_response, paginate, handle_errors

logger = logging.getLogger(__name__)


def _bool_arg(name):
    value = request.args.get(name)
    if value is None or value == '':
        return None
    return value.lower() in ('1', 'true', 'yes')


class AdminDashboardResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching dashboard data")
    def get(self):
        return success_response(moderation.dashboard(), "Dashboard data retrieved")


class AdminAnalyticsResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching analytics")
    def get(self):
        period = request.args.get('period', 30, type=int)
        return success_response(moderation.analytics(period), "Analytics retrieved")


class AdminUserListResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching users")
    def get(self):
        query = moderation.users_query(
            search=request.args.get('search'),
            role=request.args.get('role'),
            status=request.args.get('status'),
        )
        return paginate(query, lambda user: user.to_admin_dict(), default_per_page=20)


class AdminUserDetailResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching user details")
    def get(self, user_id):
        return success_response(moderation.user_detail(user_id), "User details retrieved")


class AdminUserStatusResource(Resource):
    """Ban, suspend or reinstate an account"""

    @token_required
    @admin_required
    @handle_errors("Error updating user status")
    def patch(self, user_id):
        payload = load(StatusUpdateSchema, request.get_json(silent=True))
        user = identity.set_status(current_user(), user_id, payload.status)
        verb = {'banned': 'banned', 'suspended': 'suspended', 'active': 'reinstated'}[payload.status]
        return success_response(user.to_admin_dict(), f"User {verb} successfully")


class AdminUserRoleResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error updating user role")
    def patch(self, user_id):
        payload = load(RoleUpdateSchema, request.get_json(silent=True))
        user = identity.set_role(current_user(), user_id, payload.role)
        return success_response(user.to_admin_dict(), "User role updated successfully")


class AdminSwapListResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching swaps")
    def get(self):
        query = moderation.swaps_query(
            status=request.args.get('status'),
            reported=_bool_arg('reported'),
            search=request.args.get('search'),
        )
        return paginate(query, lambda swap: swap.to_api_dict(include_report=True), default_per_page=20)


class AdminSwapResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error deleting swap")
    def delete(self, swap_id):
        moderation.delete_swap(current_user(), swap_id)
        return success_response({'id': swap_id}, "Swap deleted successfully by admin")


class AdminReportListResource(Resource):
    """Reported swap requests awaiting review"""

    @token_required
    @admin_required
    @handle_errors("Error fetching reports")
    def get(self):
        return paginate(
            moderation.reports_query(),
            lambda swap: swap.to_api_dict(include_report=True),
            default_per_page=20,
        )


class AdminRatingListResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error fetching ratings")
    def get(self):
        query = moderation.ratings_query(
            score=request.args.get('rating', type=int),
            search=request.args.get('search'),
        )
        return paginate(query, lambda rating: rating.to_api_dict(), default_per_page=20)


class AdminRatingResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error deleting rating")
    def delete(self, rating_id):
        ratings.delete(current_user(), rating_id)
        return success_response({'id': rating_id}, "Rating deleted successfully by admin")


class AdminAnnouncementListResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error creating announcement")
    def post(self):
        payload = load(AnnouncementSchema, request.get_json(silent=True))
        announcement = moderation.create_announcement(current_user(), payload)
        return success_response(announcement.to_dict(), "Announcement created successfully", 201)


class AdminAnnouncementResource(Resource):

    @token_required
    @admin_required
    @handle_errors("Error removing announcement")
    def delete(self, announcement_id):
        announcement = moderation.deactivate_announcement(current_user(), announcement_id)
        return success_response(announcement.to_dict(), "Announcement deactivated")
