from flask_restful import Resource

from services import moderation
from utils.response import success_response, handle_errors


class AnnouncementListResource(Resource):
    """Active platform announcements, newest first"""

    @handle_errors("Error fetching announcements")
    def get(self):
        announcements = [a.to_dict() for a in moderation.active_announcements()]
        return success_response(announcements, "Announcements retrieved")
