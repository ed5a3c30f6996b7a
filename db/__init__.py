from .database import init_db, get_db, build_engine, make_session_factory, engine, SessionLocal
from .models import Base, Product
from .repository import (
    ProductRepository, SqlProductRepository, ProductNotFound,
    apply_patch, to_facts, to_snapshot, UPDATABLE_FIELDS,
)

__all__ = [
    "init_db", "get_db", "build_engine", "make_session_factory", "engine", "SessionLocal",
    "Base", "Product",
    "ProductRepository", "SqlProductRepository", "ProductNotFound",
    "apply_patch", "to_facts", "to_snapshot", "UPDATABLE_FIELDS",
]
