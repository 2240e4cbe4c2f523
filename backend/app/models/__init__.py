from app.db.base import Base  # noqa: F401
from app.models.catalog import Product  # noqa: F401
from app.models.user import User  # noqa: F401
