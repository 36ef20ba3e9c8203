# app/api/routers/promo_codes.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_caller
from app.data.database import get_db
from app.domain.order_status import Caller, Role, require_role
from app.domain.schemas import (
    MessageOut,
    PromoCodeCreate,
    PromoCodeOut,
    PromoCodeUpdate,
    PromoValidateIn,
    PromoValidateOut,
)
from app.services.promo_service import PromoService

router = APIRouter(prefix="/promo-codes", tags=["promo-codes"])


def get_service(db: Session = Depends(get_db)) -> PromoService:
    return PromoService(db)


@router.post("/validate", response_model=PromoValidateOut)
def validate_promo_code(
    payload: PromoValidateIn,
    caller: Caller = Depends(get_caller),
    svc: PromoService = Depends(get_service),
):
    """Podglad rabatu dla ekranu koszyka - nic nie zapisuje."""
    require_role(caller, Role.CUSTOMER)
    return svc.validate(payload.code, caller.user_id, payload.cart_total)


@router.post("/", response_model=PromoCodeOut, status_code=201)
def create_promo_code(
    payload: PromoCodeCreate,
    caller: Caller = Depends(get_caller),
    svc: PromoService = Depends(get_service),
):
    require_role(caller, Role.ADMIN)
    return svc.create_promo_code(payload.model_dump())


@router.get("/", response_model=List[PromoCodeOut])
def list_promo_codes(caller: Caller = Depends(get_caller), svc: PromoService = Depends(get_service)):
    require_role(caller, Role.ADMIN)
    return svc.list_promo_codes()


@router.put("/{promo_code_id}/deactivate", response_model=PromoCodeOut)
def deactivate_promo_code(
    promo_code_id: int,
    caller: Caller = Depends(get_caller),
    svc: PromoService = Depends(get_service),
):
    require_role(caller, Role.ADMIN)
    return svc.deactivate_promo_code(promo_code_id)


@router.put("/{promo_code_id}", response_model=PromoCodeOut)
def update_promo_code(
    promo_code_id: int,
    payload: PromoCodeUpdate,
    caller: Caller = Depends(get_caller),
    svc: PromoService = Depends(get_service),
):
    require_role(caller, Role.ADMIN)
    return svc.update_promo_code(promo_code_id, payload.model_dump(exclude_unset=True))


@router.delete("/{promo_code_id}", response_model=MessageOut)
def delete_promo_code(
    promo_code_id: int,
    caller: Caller = Depends(get_caller),
    svc: PromoService = Depends(get_service),
):
    """Tylko nieuzyte kody. Uzyty kod mozna jedynie dezaktywowac."""
    require_role(caller, Role.ADMIN)
    svc.delete_promo_code(promo_code_id)
    return {"message": "Promo code deleted successfully"}
