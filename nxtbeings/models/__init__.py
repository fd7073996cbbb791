"""
Database Models
"""
from .user import Applicant, Recruiter

__all__ = [
    "Applicant",
    "Recruiter",
]

# Export Base from database
from nxtbeings.core.database import Base
