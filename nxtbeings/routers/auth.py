"""
Authentication and KYC phone verification endpoints
"""
import logging
from typing import List, Literal, Optional
from fastapi import APIRouter, Request, HTTPException, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.orm import Session
from nxtbeings.core.database import get_db
from nxtbeings.core.config import settings
from nxtbeings.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from nxtbeings.models import Applicant, Recruiter
from nxtbeings.services.otp_service import OtpService, OtpDeliveryError
from nxtbeings.services.otp_store import UserRole
from nxtbeings.utils.datetime_utils import utcnow
from nxtbeings.utils.phone_validator import mask_phone, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
bearer = HTTPBearer(auto_error=False)

USER_MODELS = {
    UserRole.APPLICANT: Applicant,
    UserRole.RECRUITER: Recruiter,
}

VALID_WORK_TYPES = {"full-time", "part-time", "contract", "freelance", "internship"}


def _strip_required(value: str, min_length: int, label: str) -> str:
    value = (value or "").strip()
    if len(value) < min_length:
        if min_length == 1:
            raise ValueError(f"{label} is required")
        raise ValueError(f"{label} must be at least {min_length} characters")
    return value


# ==================== Request models ====================

class RegisterRequest(BaseModel):
    firstName: str
    lastName: str
    email: EmailStr
    password: str
    currentRole: str

    @field_validator("firstName")
    @classmethod
    def check_first_name(cls, value: str) -> str:
        return _strip_required(value, 2, "First name")

    @field_validator("lastName")
    @classmethod
    def check_last_name(cls, value: str) -> str:
        return _strip_required(value, 2, "Last name")

    @field_validator("currentRole")
    @classmethod
    def check_current_role(cls, value: str) -> str:
        return _strip_required(value, 1, "Current role")

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
        return value


class RegisterApplicantRequest(RegisterRequest):
    yearsOfExperience: Optional[int] = Field(default=None, ge=0)
    preferredWorkType: List[str] = []


class CompanyIn(BaseModel):
    name: str
    industry: str
    size: Literal["startup", "small", "medium", "large", "enterprise"]

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _strip_required(value, 1, "Company name")

    @field_validator("industry")
    @classmethod
    def check_industry(cls, value: str) -> str:
        return _strip_required(value, 1, "Company industry")


class RegisterRecruiterRequest(RegisterRequest):
    company: CompanyIn
    department: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    userType: UserRole


class SendOtpRequest(BaseModel):
    phone: str
    userType: UserRole

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        is_valid, cleaned = validate_phone(value)
        if not is_valid:
            raise ValueError("Valid phone number is required")
        return cleaned


class VerifyOtpRequest(SendOtpRequest):
    # ASCII digits only; \d would also accept other scripts' digits
    otp: str = Field(pattern=r"^[0-9]{6}$")
    userId: int


# ==================== Dependencies ====================

def get_otp_service(request: Request) -> OtpService:
    """Dependency for the application's OTP service"""
    return request.app.state.otp_service


def require_otp_enabled():
    if not settings.FEATURE_OTP_ENABLED:
        raise HTTPException(status_code=403, detail="OTP is disabled")


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
):
    """Resolve the bearer token to an applicant or recruiter"""
    if not creds or not creds.credentials:
        raise HTTPException(status_code=401, detail="No token provided")

    try:
        payload = decode_access_token(creds.credentials)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    user_type = payload.get("userType")
    if not sub or user_type not in ("applicant", "recruiter"):
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.get(USER_MODELS[UserRole(user_type)], int(sub))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="User account is deactivated")
    return user


def _auth_response(message: str, user) -> dict:
    return {
        "message": message,
        "token": create_access_token(user.id, user.user_type),
        "user": user.to_dict(),
    }


def _email_taken(db: Session, model, email: str) -> bool:
    return db.query(model).filter(model.email == email).first() is not None


# ==================== Registration & login ====================

@router.post("/register/applicant", status_code=201)
async def register_applicant(body: RegisterApplicantRequest, db: Session = Depends(get_db)):
    """
    Register a new applicant
    """
    email = str(body.email).lower()
    if _email_taken(db, Applicant, email):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    applicant = Applicant(
        first_name=body.firstName,
        last_name=body.lastName,
        email=email,
        password_hash=hash_password(body.password),
        current_role=body.currentRole,
        years_of_experience=body.yearsOfExperience,
        preferred_work_type=[t for t in body.preferredWorkType if t in VALID_WORK_TYPES],
    )
    db.add(applicant)
    db.commit()
    db.refresh(applicant)
    logger.info("Applicant registered: %s", applicant.id)

    return _auth_response("Applicant registered successfully", applicant)


@router.post("/register/recruiter", status_code=201)
async def register_recruiter(body: RegisterRecruiterRequest, db: Session = Depends(get_db)):
    """
    Register a new recruiter
    """
    email = str(body.email).lower()
    if _email_taken(db, Recruiter, email):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    recruiter = Recruiter(
        first_name=body.firstName,
        last_name=body.lastName,
        email=email,
        password_hash=hash_password(body.password),
        current_role=body.currentRole,
        company_name=body.company.name,
        company_industry=body.company.industry,
        company_size=body.company.size,
        department=body.department,
    )
    db.add(recruiter)
    db.commit()
    db.refresh(recruiter)
    logger.info("Recruiter registered: %s", recruiter.id)

    return _auth_response("Recruiter registered successfully", recruiter)


@router.post("/login")
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    Email and password login for applicants and recruiters
    """
    model = USER_MODELS[body.userType]
    user = db.query(model).filter(model.email == str(body.email).lower()).first()
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    user.last_active = utcnow()
    db.commit()
    db.refresh(user)

    return _auth_response("Login successful", user)


@router.get("/validate")
async def validate_token(user=Depends(get_current_user)):
    """
    Validate token and return fresh user data
    """
    return {"message": "Token validated successfully", "user": user.to_dict()}


@router.get("/me")
async def get_me(user=Depends(get_current_user)):
    """
    Get current logged-in user
    """
    return {"user": user.to_dict()}


# ==================== KYC ====================

@router.post("/kyc/send-otp", dependencies=[Depends(require_otp_enabled)])
async def send_kyc_otp(body: SendOtpRequest, otp_service: OtpService = Depends(get_otp_service)):
    """
    Send OTP for KYC verification
    """
    try:
        receipt = await otp_service.send_code(body.phone, body.userType)
    except OtpDeliveryError as e:
        logger.error("Error sending KYC OTP to %s: %s", mask_phone(body.phone), e)
        raise HTTPException(status_code=500, detail="Failed to send OTP")

    return {
        "message": "OTP sent successfully for KYC verification",
        "phone": receipt.phone,
        "userType": receipt.role.value,
        "expiresIn": otp_service.expiry_seconds,
    }


@router.post("/kyc/verify-otp", dependencies=[Depends(require_otp_enabled)])
async def verify_kyc_otp(
    body: VerifyOtpRequest,
    otp_service: OtpService = Depends(get_otp_service),
    db: Session = Depends(get_db),
):
    """
    Verify OTP and mark the applicant/recruiter as KYC verified
    """
    result = await otp_service.verify_code(body.phone, body.userType, body.otp)
    if not result.accepted:
        raise HTTPException(status_code=400, detail=result.message)

    model = USER_MODELS[body.userType]
    user = db.get(model, body.userId)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.phone = body.phone
    user.phone_verified = True
    user.is_kyc_verified = True
    db.commit()
    db.refresh(user)
    logger.info("KYC verified for %s %s", body.userType.value, user.id)

    return {
        "message": "KYC verification completed successfully",
        "user": user.to_dict(),
    }
