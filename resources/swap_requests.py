import logging
from flask import request
from flask_restful import Resource

from middleware.auth import token_required, current_user
from models.swap_requests import SWAP_STATUSES
from schemas import load
from schemas.swaps import SwapRequestCreateSchema, CancelSchema, ReportSchema
from services import swaps
from utils.errors import ValidationError
from utils.response import success_response, paginate, handle_errors

logger = logging.getLogger(__name__)


class SwapRequestListResource(Resource):
    """The caller's swap requests, and opening new ones"""

    @token_required
    @handle_errors("Error fetching swap requests")
    def get(self):
        kind = request.args.get('type', 'all')
        status = request.args.get('status') or None
        if status and status not in SWAP_STATUSES:
            raise ValidationError("Invalid status filter", {'status': f"must be one of {', '.join(SWAP_STATUSES)}"})

        query = swaps.list_requests(current_user(), kind, status)
        return paginate(query, lambda swap: swap.to_api_dict())

    @token_required
    @handle_errors("Error creating swap request")
    def post(self):
        payload = load(SwapRequestCreateSchema, request.get_json(silent=True))
        swap = swaps.create_request(current_user(), payload)
        return success_response(swap.to_api_dict(), "Swap request sent successfully", 201)


class SwapRequestResource(Resource):

    @token_required
    @handle_errors("Error fetching swap request")
    def get(self, swap_id):
        swap = swaps.view_request(current_user(), swap_id)
        return success_response(swap.to_api_dict(), "Swap request retrieved")

    @token_required
    @handle_errors("Error deleting swap request")
    def delete(self, swap_id):
        swaps.delete_request(current_user(), swap_id)
        return success_response({'id': swap_id}, "Swap request deleted successfully")


class SwapRequestAcceptResource(Resource):

    @token_required
    @handle_errors("Error accepting swap request")
    def patch(self, swap_id):
        swap = swaps.accept(current_user(), swap_id)
        return success_response(swap.to_api_dict(), "Swap request accepted successfully")


class SwapRequestRejectResource(Resource):

    @token_required
    @handle_errors("Error rejecting swap request")
    def patch(self, swap_id):
        swap = swaps.reject(current_user(), swap_id)
        return success_response(swap.to_api_dict(), "Swap request rejected successfully")


class SwapRequestCompleteResource(Resource):

    @token_required
    @handle_errors("Error completing swap")
    def patch(self, swap_id):
        swap = swaps.complete(current_user(), swap_id)
        return success_response(swap.to_api_dict(), "Swap completed successfully")


class SwapRequestCancelResource(Resource):

    @token_required
    @handle_errors("Error cancelling swap request")
    def patch(self, swap_id):
        payload = load(CancelSchema, request.get_json(silent=True))
        swap = swaps.cancel(current_user(), swap_id, payload.reason)
        return success_response(swap.to_api_dict(), "Swap request cancelled successfully")


class SwapRequestReportResource(Resource):

    @token_required
    @handle_errors("Error reporting swap request")
    def post(self, swap_id):
        payload = load(ReportSchema, request.get_json(silent=True))
        swap = swaps.report(current_user(), swap_id, payload.reason, payload.details)
        return success_response(
            {'id': swap.id, 'is_reported': swap.is_reported},
            "Swap request reported. Our moderators will review it."
        )
