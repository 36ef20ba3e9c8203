# app/services/auth_service.py
import re
import secrets
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.user import UserModel
from app.domain.errors import ValidationError
from app.domain.order_status import Caller, Role
from app.repos.user_repo import UserRepo
from app.services.otp_store import OTP_MISSING, OTP_OK, OtpStore, SessionStore
from app.utils.logging import get_logger
from app.utils.settings import OTP_DEBUG_ECHO

logger = get_logger(__name__)

_PHONE_RE = re.compile(r"^\+?[0-9]{6,15}$")


def normalize_phone(phone: str | None) -> str:
    phone = re.sub(r"[\s\-()]", "", phone or "")
    if not _PHONE_RE.match(phone):
        raise ValidationError("Valid phone number is required")
    return phone


class AuthService:
    """
    Logowanie kodem OTP.
    Magazyny OTP i sesji sa wstrzykiwane (redis), brak stanu globalnego.
    """

    def __init__(self, db: Session, otp_store: OtpStore, session_store: SessionStore):
        self.repo = UserRepo(db)
        self.otp_store = otp_store
        self.session_store = session_store

    def send_otp(self, phone: str) -> Dict[str, Any]:
        phone = normalize_phone(phone)
        code = f"{secrets.randbelow(1_000_000):06d}"

        self.otp_store.save(phone, code)
        # TODO: bramka SMS - do tego czasu kod tylko w trybie OTP_DEBUG_ECHO
        logger.info(f"OTP sent to {phone}")

        result = {"message": "OTP sent", "expires_in": self.otp_store.ttl}
        if OTP_DEBUG_ECHO:
            result["otp"] = code
        return result

    def verify_otp(self, phone: str, code: str) -> Dict[str, Any]:
        phone = normalize_phone(phone)
        code = (code or "").strip()
        if not code:
            raise ValidationError("Phone and OTP are required")

        outcome = self.otp_store.verify(phone, code)
        if outcome == OTP_MISSING:
            raise ValidationError("No OTP sent for this phone or OTP expired")
        if outcome != OTP_OK:
            logger.info(f"Invalid OTP for {phone}")
            raise ValidationError("Invalid OTP")

        user = self.repo.get_by_phone(phone)
        if not user:
            user = self._create_customer(phone)

        token = self.session_store.create(user.id, user.role)
        logger.info(f"User {user.id} ({user.role}) logged in")

        return {"token": token, "user_id": user.id, "role": user.role}

    def logout(self, caller: Caller, token: str) -> Dict[str, Any]:
        self.session_store.delete(token)
        logger.info(f"User {caller.user_id} logged out")
        return {"message": "Logged out"}

    def get_caller(self, token: str) -> Caller | None:
        session = self.session_store.get(token)
        if not session:
            return None

        user_id, role = session
        try:
            return Caller(user_id=user_id, role=Role(role))
        except ValueError:
            logger.warning(f"Session for user {user_id} has unknown role {role}")
            return None

    def _create_customer(self, phone: str) -> UserModel:
        #nowy numer = nowe konto klienta
        try:
            user = self.repo.create_user(UserModel(full_name="", phone=phone, role=Role.CUSTOMER.value))
        except IntegrityError:
            #rownolegle logowanie tym samym numerem
            self.repo.rollback()
            user = self.repo.get_by_phone(phone)
        logger.info(f"Created customer account {user.id} for {phone}")
        return user
