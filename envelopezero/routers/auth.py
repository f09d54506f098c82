from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_bearer_token, get_current_user, require_passkeys_enabled
from envelopezero.schemas import (
    MagicLinkRequestIn,
    MagicLinkRequestOut,
    MagicLinkVerifyIn,
    MagicLinkVerifyOut,
    MeOut,
)
from envelopezero.services.auth_service import MagicLinkService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/magic-link/request", response_model=MagicLinkRequestOut)
def request_magic_link(payload: MagicLinkRequestIn, db: Session = Depends(get_db)):
    message, debug_token = MagicLinkService(db).request(payload.email)
    return MagicLinkRequestOut(message=message, debug_token=debug_token)


@router.post("/magic-link/verify", response_model=MagicLinkVerifyOut)
def verify_magic_link(payload: MagicLinkVerifyIn, db: Session = Depends(get_db)):
    token, user = MagicLinkService(db).verify(payload.token)
    return MagicLinkVerifyOut(token=token, user_id=user.public_id)


@router.get("/me", response_model=MeOut)
def me(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return MeOut(id=current_user.public_id, email=MagicLinkService(db).primary_email(current_user))


@router.post("/logout", status_code=204)
def logout(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    MagicLinkService(db).logout(token)
    return Response(status_code=204)


# Passkey registration is a placeholder: hidden when disabled, 501 when enabled
passkey_router = APIRouter(prefix="/passkey", dependencies=[Depends(require_passkeys_enabled)])


@passkey_router.post("/register/start")
def passkey_register_start():
    raise HTTPException(status_code=501, detail="Passkey registration is not implemented")


@passkey_router.post("/register/finish")
def passkey_register_finish():
    raise HTTPException(status_code=501, detail="Passkey registration is not implemented")


router.include_router(passkey_router)
