import logging
from flask import request
from flask_restful import Resource

from middleware.auth import token_required, current_user
from schemas import load
from schemas.ratings import RatingCreateSchema, RatingUpdateSchema
from services import ratings, identity
from utils.response import success_response, paginate, handle_errors

logger = logging.getLogger(__name__)


class RatingListResource(Resource):

    @token_required
    @handle_errors("Error submitting rating")
    def post(self):
        """Rate the other party of a completed swap"""
        payload = load(RatingCreateSchema, request.get_json(silent=True))
        rating = ratings.submit(current_user(), payload)
        return success_response(rating.to_api_dict(), "Rating submitted successfully", 201)


class RatingResource(Resource):

    @handle_errors("Error fetching rating")
    def get(self, rating_id):
        rating = ratings.get_rating(rating_id)
        return success_response(rating.to_api_dict(), "Rating retrieved")

    @token_required
    @handle_errors("Error updating rating")
    def put(self, rating_id):
        payload = load(RatingUpdateSchema, request.get_json(silent=True))
        rating = ratings.edit(current_user(), rating_id, payload.model_dump(exclude_unset=True))
        return success_response(rating.to_api_dict(), "Rating updated successfully")

    @token_required
    @handle_errors("Error deleting rating")
    def delete(self, rating_id):
        ratings.delete(current_user(), rating_id)
        return success_response({'id': rating_id}, "Rating deleted successfully")


class UserRatingsResource(Resource):
    """Ratings a user gave or received"""

    @handle_errors("Error fetching ratings")
    def get(self, user_id):
        identity.get_user(user_id)
        return paginate(ratings.ratings_for_user(user_id), lambda r: r.to_api_dict())


class SwapRatingsResource(Resource):

    @handle_errors("Error fetching swap ratings")
    def get(self, swap_id):
        return paginate(ratings.ratings_for_swap(swap_id), lambda r: r.to_api_dict())


class RatingAverageResource(Resource):

    @handle_errors("Error calculating average rating")
    def get(self, user_id):
        return success_response(ratings.average_for(user_id), "Average rating retrieved")
