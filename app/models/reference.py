"""
Reference Models
Read-only lookup tables: geography, positions, bank accounts and hotlines
"""

from sqlalchemy import Column, String, Integer
from app.database import Base


class Lgu(Base):
    __tablename__ = "lgus"

    psgc = Column(String(12), primary_key=True)
    lguname = Column(String(150), nullable=False, index=True)
    geolevel = Column(String(10), nullable=False, index=True)  # PROV, CITY, MUN, BGY


class Position(Base):
    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    lvl = Column(String(20), nullable=True)


class Bank(Base):
    __tablename__ = "banks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    confcode = Column(String(20), nullable=False, index=True)
    bank_name = Column(String(150), nullable=False)
    acct_no = Column(String(50), nullable=False)
    payee = Column(String(150), nullable=True)


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    confcode = Column(String(20), nullable=False, index=True)
    contact_no = Column(String(30), nullable=False)
