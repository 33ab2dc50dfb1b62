"""
Seed script to populate the database with demo accounts for trying out swaps.
Run this script with: python seed_users.py
"""
from app import create_app
from models import db
from models.users import User
from services.identity import find_by_email
from utils.security import hash_password
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEED_USERS = [
    {
        "name": "Demo User",
        "email": "demo@skillswap.com",
        "password": "demo123",
        "role": "user",
        "skills_offered": ["React", "JavaScript", "Node.js"],
        "skills_wanted": ["UI/UX Design", "Python", "Machine Learning"],
        "bio": "I love learning new technologies and sharing my knowledge with others.",
        "location": "Mumbai, India"
    },
    {
        "name": "Admin User",
        "email": "admin@skillswap.com",
        "password": "admin123",
        "role": "admin",
        "skills_offered": ["System Administration", "Database Management", "Security"],
        "skills_wanted": ["Cloud Computing", "DevOps", "AI/ML"],
        "bio": "Platform administrator helping users connect and learn together.",
        "location": "Delhi, India"
    },
    {
        "name": "Sarah Chen",
        "email": "sarah@example.com",
        "password": "password123",
        "role": "user",
        "skills_offered": ["UI/UX Design", "Figma", "Prototyping"],
        "skills_wanted": ["React", "JavaScript", "Node.js"],
        "bio": "UI/UX designer passionate about creating beautiful user experiences.",
        "location": "Mumbai, India"
    },
    {
        "name": "Rahul Sharma",
        "email": "rahul@example.com",
        "password": "password123",
        "role": "user",
        "skills_offered": ["Python", "Machine Learning", "Data Analysis"],
        "skills_wanted": ["Web Development", "JavaScript", "React"],
        "bio": "Data scientist exploring the world of AI and machine learning.",
        "location": "Delhi, India"
    },
    {
        "name": "Priya Patel",
        "email": "priya@example.com",
        "password": "password123",
        "role": "user",
        "skills_offered": ["Content Writing", "SEO", "Social Media"],
        "skills_wanted": ["Graphic Design", "Photoshop", "Illustrator"],
        "bio": "Content creator and digital marketer helping brands grow online.",
        "location": "Bangalore, India"
    }
]


def seed_database(app=None):
    """Create any seed account whose email is not registered yet"""
    app = app or create_app()
    with app.app_context():
        db.create_all()
        logger.info("Starting database seeding...")

        created = 0
        for user_data in SEED_USERS:
            if find_by_email(user_data["email"]):
                logger.info(f"Seed user {user_data['email']} already exists")
                continue

            user = User(
                name=user_data["name"],
                email=user_data["email"],
                password_hash=hash_password(user_data["password"]),
                role=user_data["role"],
                skills_offered=user_data["skills_offered"],
                skills_wanted=user_data["skills_wanted"],
                bio=user_data["bio"],
                location=user_data["location"]
            )
            db.session.add(user)
            db.session.commit()
            created += 1
            logger.info(f"Created {user.role} {user.name} ({user.id})")

        logger.info(f"Seeding complete: {created} created, {User.query.count()} users total")
        for user_data in SEED_USERS:
            logger.info(f"  {user_data['email']} / {user_data['password']}")
        return created


if __name__ == "__main__":
    seed_database()
