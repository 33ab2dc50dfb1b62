from flask import Flask
from flask_cors import CORS
from flask_restful import Api, Resource
from flask_migrate import Migrate
from models import db
from config import Config
from utils.cache import init_cache
import click
import logging

migrate = Migrate()


class HealthCheck(Resource):
    def get(self):
        return {"status": "ok"}


def register_routes(api):
    from resources.auth import (
        RegisterResource,
        LoginResource,
        CurrentSessionResource,
        RefreshTokenResource,
        LogoutResource,
        ChangePasswordResource
    )
    from resources.users import UserListResource, UserStatsResource, UserProfileResource
    from resources.swap_requests import (
        SwapRequestListResource,
        SwapRequestResource,
        SwapRequestAcceptResource,
        SwapRequestRejectResource,
        SwapRequestCompleteResource,
        SwapRequestCancelResource,
        SwapRequestReportResource
    )
    from resources.ratings import (
        RatingListResource,
        RatingResource,
        UserRatingsResource,
        SwapRatingsResource,
        RatingAverageResource
    )
    from resources.announcements import AnnouncementListResource
    from resources.admin import (
        AdminDashboardResource,
        AdminAnalyticsResource,
        AdminUserListResource,
        AdminUserDetailResource,
        AdminUserStatusResource,
        AdminUserRoleResource,
        AdminSwapListResource,
        AdminSwapResource,
        AdminReportListResource,
        AdminRatingListResource,
        AdminRatingResource,
        AdminAnnouncementListResource,
        AdminAnnouncementResource
    )

    api.add_resource(HealthCheck, '/health')

    # Auth routes
    api.add_resource(RegisterResource, '/auth/register')
    api.add_resource(LoginResource, '/auth/login')
    api.add_resource(CurrentSessionResource, '/auth/me')
    api.add_resource(RefreshTokenResource, '/auth/refresh')
    api.add_resource(LogoutResource, '/auth/logout')
    api.add_resource(ChangePasswordResource, '/auth/change-password')

    # User directory
    api.add_resource(UserListResource, '/users')
    api.add_resource(UserStatsResource, '/users/stats')
    api.add_resource(UserProfileResource, '/users/<string:user_id>')

    # Swap request routes
    api.add_resource(SwapRequestListResource, '/swapRequests')
    api.add_resource(SwapRequestResource, '/swapRequests/<string:swap_id>')
    api.add_resource(SwapRequestAcceptResource, '/swapRequests/<string:swap_id>/accept')
    api.add_resource(SwapRequestRejectResource, '/swapRequests/<string:swap_id>/reject')
    api.add_resource(SwapRequestCompleteResource, '/swapRequests/<string:swap_id>/complete')
    api.add_resource(SwapRequestCancelResource, '/swapRequests/<string:swap_id>/cancel')
    api.add_resource(SwapRequestReportResource, '/swapRequests/<string:swap_id>/report')

    # Rating routes
    api.add_resource(RatingListResource, '/ratings')
    api.add_resource(RatingResource, '/ratings/<string:rating_id>')
    api.add_resource(UserRatingsResource, '/ratings/user/<string:user_id>')
    api.add_resource(SwapRatingsResource, '/ratings/swap/<string:swap_id>')
    api.add_resource(RatingAverageResource, '/ratings/average/<string:user_id>')

    api.add_resource(AnnouncementListResource, '/announcements')

    # Admin routes
    api.add_resource(AdminDashboardResource, '/admin/dashboard')
    api.add_resource(AdminAnalyticsResource, '/admin/analytics')
    api.add_resource(AdminUserListResource, '/admin/users')
    api.add_resource(AdminUserDetailResource, '/admin/users/<string:user_id>')
    api.add_resource(AdminUserStatusResource, '/admin/users/<string:user_id>/status')
    api.add_resource(AdminUserRoleResource, '/admin/users/<string:user_id>/role')
    api.add_resource(AdminSwapListResource, '/admin/swaps')
    api.add_resource(AdminSwapResource, '/admin/swaps/<string:swap_id>')
    api.add_resource(AdminReportListResource, '/admin/reports')
    api.add_resource(AdminRatingListResource, '/admin/ratings')
    api.add_resource(AdminRatingResource, '/admin/ratings/<string:rating_id>')
    api.add_resource(AdminAnnouncementListResource, '/admin/announcements')
    api.add_resource(AdminAnnouncementResource, '/admin/announcements/<string:announcement_id>')


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s %(message)s'
    )

    origins = app.config['CORS_ORIGINS']
    CORS(app, origins=origins if origins == '*' else [o.strip() for o in origins.split(',')])

    db.init_app(app)
    migrate.init_app(app, db)
    init_cache(app)

    api = Api(app)
    register_routes(api)

    @app.cli.command('init-db')
    def init_db():
        """Create all tables without running migrations"""
        db.create_all()
        click.echo('Database tables created')

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
