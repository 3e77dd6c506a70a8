"""HTTP routes for the Green Wallet API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from greenwallet.api.models import (
    RegisterAccountRequest,
    AccountResponse,
    SubmissionRequest,
    RedemptionRequest,
    ReferralCodeResponse,
)
from greenwallet.badges import Badge
from greenwallet.bonus_window import BonusStatus
from greenwallet.errors import (
    AccountExists,
    AccountNotFound,
    GreenWalletError,
    InsufficientBalance,
    PersistConflict,
    ValidationError,
)
from greenwallet.models import Profile, Submission, TransactionKind, UserAccount
from greenwallet.wallet_service import (
    BalanceSnapshot,
    Dashboard,
    GreenWalletService,
    HistoryPage,
    PointsPreview,
    RedemptionResult,
    SubmissionResult,
    UserStats,
)


router = APIRouter()


def get_service(req: Request) -> GreenWalletService:
    service = getattr(req.app.state, "service", None)
    if service is None:
        raise RuntimeError("Green Wallet service not initialized")
    return service


def _http_error(exc: GreenWalletError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail={
            "message": "Validation failed",
            "code": exc.code,
            "errors": exc.errors,
        })
    if isinstance(exc, InsufficientBalance):
        return HTTPException(status_code=400, detail={
            "message": "Insufficient points balance",
            "code": exc.code,
            "current_balance": exc.current,
            "requested": exc.requested,
        })
    if isinstance(exc, AccountNotFound):
        return HTTPException(status_code=404, detail={
            "message": str(exc), "code": exc.code, "user_id": exc.user_id,
        })
    if isinstance(exc, AccountExists):
        return HTTPException(status_code=409, detail={
            "message": str(exc), "code": exc.code, "user_id": exc.user_id,
        })
    if isinstance(exc, PersistConflict):
        return HTTPException(status_code=409, detail={
            "message": str(exc),
            "code": exc.code,
            "user_id": exc.user_id,
            "expected_version": exc.expected_version,
            "actual_version": exc.actual_version,
        })
    return HTTPException(status_code=500, detail={"message": str(exc), "code": exc.code})


def _account_response(account: UserAccount) -> AccountResponse:
    return AccountResponse(
        user_id=account.user_id,
        name=account.name,
        email=account.email,
        tier=account.tier.value,
        balance=account.wallet.balance,
        badges=list(account.badges),
    )


def _submission(payload: SubmissionRequest) -> Submission:
    return Submission(**payload.model_dump())


# ------- Accounts -------

@router.post("/users", response_model=AccountResponse)
def register_account(payload: RegisterAccountRequest,
                     service: GreenWalletService = Depends(get_service)) -> AccountResponse:
    profile = Profile(
        phone=payload.phone,
        address=payload.address,
        city=payload.city,
        state=payload.state,
        zip_code=payload.zip_code,
    )
    try:
        account = service.register_account(payload.user_id, payload.name, payload.email, profile)
    except GreenWalletError as e:
        raise _http_error(e)
    return _account_response(account)


@router.get("/users/{user_id}", response_model=AccountResponse)
def get_account(user_id: str, service: GreenWalletService = Depends(get_service)) -> AccountResponse:
    try:
        account = service.get_account(user_id)
    except GreenWalletError as e:
        raise _http_error(e)
    return _account_response(account)


@router.get("/users/{user_id}/balance", response_model=BalanceSnapshot)
def get_balance(user_id: str, service: GreenWalletService = Depends(get_service)) -> BalanceSnapshot:
    try:
        return service.get_balance(user_id)
    except GreenWalletError as e:
        raise _http_error(e)


# ------- Submissions -------

@router.post("/users/{user_id}/submissions/preview", response_model=PointsPreview)
def preview_submission(user_id: str, payload: SubmissionRequest,
                       service: GreenWalletService = Depends(get_service)) -> PointsPreview:
    try:
        return service.preview_points(user_id, _submission(payload))
    except GreenWalletError as e:
        raise _http_error(e)


@router.post("/users/{user_id}/submissions", response_model=SubmissionResult)
def submit(user_id: str, payload: SubmissionRequest,
           service: GreenWalletService = Depends(get_service)) -> SubmissionResult:
    try:
        return service.submit(user_id, _submission(payload))
    except GreenWalletError as e:
        raise _http_error(e)


# ------- Redemptions -------

@router.post("/users/{user_id}/redemptions", response_model=RedemptionResult)
def redeem(user_id: str, payload: RedemptionRequest,
           service: GreenWalletService = Depends(get_service)) -> RedemptionResult:
    try:
        return service.redeem(user_id, payload.points, payload.redeem_for, payload.description)
    except GreenWalletError as e:
        raise _http_error(e)


# ------- Queries -------

@router.get("/users/{user_id}/history", response_model=HistoryPage)
def get_history(user_id: str,
                page: int = Query(default=1),
                limit: Optional[int] = Query(default=None),
                kind: Optional[TransactionKind] = Query(default=None),
                service: GreenWalletService = Depends(get_service)) -> HistoryPage:
    try:
        return service.get_history(user_id, page=page, limit=limit, kind=kind)
    except GreenWalletError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/badges", response_model=List[Badge])
def get_badges(user_id: str, service: GreenWalletService = Depends(get_service)) -> List[Badge]:
    try:
        return service.get_badges(user_id)
    except GreenWalletError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/bonus", response_model=BonusStatus)
def get_bonus_status(user_id: str, service: GreenWalletService = Depends(get_service)) -> BonusStatus:
    try:
        return service.get_bonus_status(user_id)
    except GreenWalletError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/dashboard", response_model=Dashboard)
def get_dashboard(user_id: str, service: GreenWalletService = Depends(get_service)) -> Dashboard:
    try:
        return service.get_dashboard(user_id)
    except GreenWalletError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/stats", response_model=UserStats)
def get_stats(user_id: str,
              months: int = Query(default=6),
              service: GreenWalletService = Depends(get_service)) -> UserStats:
    try:
        return service.get_stats(user_id, months=months)
    except GreenWalletError as e:
        raise _http_error(e)

@router.get("/users/{user_id}/referral-code", response_model=ReferralCodeResponse)
def get_referral_code(user_id: str,
                      service: GreenWalletService = Depends(get_service)) -> ReferralCodeResponse:
    try:
        return ReferralCodeResponse(referral_code=service.get_referral_code(user_id))
    except GreenWalletError as e:
        raise _http_error(e)
