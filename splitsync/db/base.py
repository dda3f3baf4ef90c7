"""
Declarative base for local persistence models.
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
