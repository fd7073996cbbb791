"""
Applicant and Recruiter Models
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from nxtbeings.core.database import Base
from nxtbeings.utils.datetime_utils import utcnow


class UserMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    current_role: Mapped[str] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    phone_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_kyc_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user_type = "user"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "currentRole": self.current_role,
            "userType": self.user_type,
            "avatar": f"{self.first_name[:1]}{self.last_name[:1]}",
            "phoneVerified": self.phone_verified,
            "isKYCVerified": self.is_kyc_verified,
        }


class Applicant(UserMixin, Base):
    __tablename__ = "applicants"

    user_type = "applicant"

    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    preferred_work_type: Mapped[list] = mapped_column(JSON, default=list)

    def __repr__(self):
        return f"<Applicant(id={self.id}, email={self.email})>"


class Recruiter(UserMixin, Base):
    __tablename__ = "recruiters"

    user_type = "recruiter"

    company_name: Mapped[str] = mapped_column(String(255))
    company_industry: Mapped[str] = mapped_column(String(255))
    company_size: Mapped[str] = mapped_column(String(20))
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["company"] = {
            "name": self.company_name,
            "industry": self.company_industry,
            "size": self.company_size,
        }
        return data

    def __repr__(self):
        return f"<Recruiter(id={self.id}, email={self.email})>"
