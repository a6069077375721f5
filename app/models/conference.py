"""
Conference Model
A venue/run of the event, resolved from the request domain
"""

from sqlalchemy import Column, String, Integer, Date, Text
from app.database import Base


class Conference(Base):
    __tablename__ = "conference"

    confcode = Column(String(20), primary_key=True)
    name = Column(String(200), nullable=True)
    date_from = Column(Date, nullable=True)
    date_to = Column(Date, nullable=True)
    venue = Column(String(200), nullable=True)

    # Admission
    reg_limit = Column(Integer, nullable=True)
    reg_alert_count = Column(Integer, nullable=True)

    # Domain routing
    domain = Column(String(255), nullable=True, index=True)
    prefix = Column(String(20), nullable=True)

    # Geographic restriction (comma separated PSGC prefixes)
    psgc = Column(Text, nullable=True)
    include_psgc = Column(Text, nullable=True)
    exclude_psgc = Column(Text, nullable=True)

    # Status
    on_maintenance = Column(String(1), nullable=True, default="N")
    notification = Column(Text, nullable=True)
