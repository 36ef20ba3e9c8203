# app/repos/promo_repo.py
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.promo_code import PromoCodeModel
from app.data.models.promo_code_usage import PromoCodeUsageModel


class PromoRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> PromoCodeModel | None:
        return self.db.execute(
            select(PromoCodeModel).where(func.upper(PromoCodeModel.code) == code.upper())
        ).scalar_one_or_none()

    def get(self, promo_code_id: int) -> PromoCodeModel | None:
        return self.db.get(PromoCodeModel, promo_code_id)

    def get_for_update(self, promo_code_id: int) -> PromoCodeModel | None:
        # SELECT ... FOR UPDATE - blokada wiersza do konca transakcji
        return self.db.execute(
            select(PromoCodeModel)
            .where(PromoCodeModel.id == promo_code_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_all(self) -> list[PromoCodeModel]:
        return list(
            self.db.execute(
                select(PromoCodeModel).order_by(PromoCodeModel.created_at.desc(), PromoCodeModel.id.desc())
            ).scalars()
        )

    def add(self, promo: PromoCodeModel) -> PromoCodeModel:
        self.db.add(promo)
        self.db.flush()
        return promo

    def has_usage(self, promo_code_id: int, user_id: int) -> bool:
        return self.db.execute(
            select(PromoCodeUsageModel.id).where(
                PromoCodeUsageModel.promo_code_id == promo_code_id,
                PromoCodeUsageModel.user_id == user_id,
            )
        ).first() is not None

    def is_referenced(self, promo_code_id: int) -> bool:
        if self.db.execute(
            select(PromoCodeUsageModel.id).where(PromoCodeUsageModel.promo_code_id == promo_code_id)
        ).first():
            return True
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.promo_code_id == promo_code_id)
        ).first() is not None

    def delete(self, promo: PromoCodeModel) -> None:
        self.db.delete(promo)

    def increment_used_count(self, promo_code_id: int) -> int:
        # compare-and-swap na limicie uzyc
        result = self.db.execute(
            update(PromoCodeModel)
            .where(
                PromoCodeModel.id == promo_code_id,
                or_(
                    PromoCodeModel.usage_limit.is_(None),
                    PromoCodeModel.used_count < PromoCodeModel.usage_limit,
                ),
            )
            .values(used_count=PromoCodeModel.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def add_usage(self, usage: PromoCodeUsageModel) -> PromoCodeUsageModel:
        self.db.add(usage)
        self.db.flush()
        return usage

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
