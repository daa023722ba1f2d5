"""SQLAlchemy models.

Models inherit from Base so that Alembic's autogenerate can detect them.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from storemanager.db.session import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[float]

    def __repr__(self) -> str:
        return f"Product(id={self.id!r}, name={self.name!r}, price={self.price!r})"
