"""
Registration Models
Header (one per submitted form), details (one per participant) and payment proofs
"""

from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Text, ForeignKey, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from app.database import Base


class RegistrationHeader(Base):
    __tablename__ = "regh"

    regnum = Column(Integer, primary_key=True, autoincrement=True)
    regid = Column(String(6), unique=True, nullable=False, index=True)
    confcode = Column(String(20), ForeignKey("conference.confcode"), nullable=False, index=True)

    province = Column(String(150), nullable=False)
    lgu = Column(String(150), nullable=False)
    contactperson = Column(String(150), nullable=False)
    contactnum = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)
    regdate = Column(DateTime, nullable=False)

    # NULL, PENDING, APPROVED or REJECTED (set by moderation)
    status = Column(String(20), nullable=True, default="PENDING")
    remarks = Column(Text, nullable=True)
    payment_proof_url = Column(Text, nullable=True)

    details = relationship("RegistrationDetail", backref="header", cascade="all, delete-orphan")


class RegistrationDetail(Base):
    __tablename__ = "regd"
    __table_args__ = (
        UniqueConstraint("regnum", "linenum", name="uq_regd_regnum_linenum"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    regnum = Column(Integer, ForeignKey("regh.regnum", ondelete="CASCADE"), nullable=False, index=True)
    regid = Column(String(6), nullable=False, index=True)
    confcode = Column(String(20), nullable=False, index=True)
    linenum = Column(Integer, nullable=False)

    # Participant
    lastname = Column(String(100), nullable=False)
    firstname = Column(String(100), nullable=False)
    middleinit = Column(String(10), nullable=True)
    suffix = Column(String(10), nullable=True)
    designation = Column(String(150), nullable=True)
    brgy = Column(String(150), nullable=True)
    lgu = Column(String(150), nullable=False)
    province = Column(String(150), nullable=False, index=True)
    tshirtsize = Column(String(5), nullable=True)
    contactnum = Column(String(30), nullable=True)
    prcnum = Column(String(30), nullable=True)
    expirydate = Column(Date, nullable=True)
    email = Column(String(255), nullable=True)


class PaymentProof(Base):
    __tablename__ = "regdep"
    __table_args__ = (
        UniqueConstraint("regid", "confcode", "linenum", name="uq_regdep_regid_confcode_linenum"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    regid = Column(String(6), ForeignKey("regh.regid", ondelete="CASCADE"), nullable=False, index=True)
    confcode = Column(String(20), nullable=False)
    linenum = Column(Integer, nullable=False)
    payment_proof_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
