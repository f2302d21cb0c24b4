from sqlalchemy import Column, BigInteger, Integer, String
from .db import Base


class Person(Base):
    __tablename__ = "people"
    # BIGINT on PostgreSQL, INTEGER (rowid alias) on SQLite
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255))
    city = Column(String(255))
