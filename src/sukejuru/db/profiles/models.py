from sqlalchemy import Column, String, Integer, DateTime

from sukejuru.db.base import Base
from sukejuru.utils.app_utils import utc_now


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True)
    email = Column(String(255))
    name = Column(String(255))
    program = Column(String(255))
    graduation_year = Column(Integer)
    university_name = Column(String(255))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
