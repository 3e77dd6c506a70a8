"""Pydantic models for the Green Wallet HTTP API."""

from typing import Optional, List
from pydantic import BaseModel, Field


# -------- Accounts --------

class RegisterAccountRequest(BaseModel):
    user_id: str = Field(min_length=1)
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class AccountResponse(BaseModel):
    user_id: str
    name: str
    email: str
    tier: str
    balance: int
    badges: List[str]


# -------- Submissions --------

class SubmissionRequest(BaseModel):
    item_type: Optional[str] = None
    condition: Optional[str] = None
    quantity: Optional[int] = None
    weight: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


# -------- Redemptions --------

class RedemptionRequest(BaseModel):
    points: int
    redeem_for: str
    description: Optional[str] = None


# -------- Referrals --------

class ReferralCodeResponse(BaseModel):
    referral_code: str
