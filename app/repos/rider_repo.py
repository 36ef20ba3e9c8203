# app/repos/rider_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.rider import RiderModel


class RiderRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user_id(self, user_id: int) -> RiderModel | None:
        return self.db.execute(
            select(RiderModel).where(RiderModel.user_id == user_id)
        ).scalar_one_or_none()
