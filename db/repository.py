"""
Product catalog repository.

The scoring engine never touches the catalog; request handlers resolve
products here and pass plain ProductFacts / AnalyticsSnapshot values on.

Updates go through `apply_patch`, which only copies the fields listed in
UPDATABLE_FIELDS; `id` and `created_at` can never be overwritten.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from analyzers.errors import ValidationError
from analyzers.pricing import require_positive_price
from db.database import SessionLocal, get_db
from db.models import Product, empty_analytics
from models.schemas import AnalyticsSnapshot, ProductFacts

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "brand",
    "ingredients",
    "specifications",
    "images",
    "tags",
    "analytics",
)

ANALYTICS_FIELDS = ("views", "sales", "reviews", "rating", "sentiment")


class ProductNotFound(KeyError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(product_id)

    def __str__(self):
        return "Product not found"


def _validated(field_name: str, value: Any) -> Any:
    if field_name == "name":
        if not value or not str(value).strip():
            raise ValidationError("Name is required")
        return str(value).strip()
    if field_name == "price":
        return require_positive_price(value)
    if field_name in ("images", "tags"):
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"{field_name} must be a list")
        return list(value)
    if field_name == "specifications":
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValidationError("specifications must be an object")
        return dict(value)
    return value


def apply_patch(current: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge `patch` into a copy of `current`. Unknown and immutable keys are
    ignored; analytics is merged key by key; updated_at is refreshed.
    """
    merged = dict(current)
    for field_name in UPDATABLE_FIELDS:
        if field_name not in patch:
            continue
        value = patch[field_name]
        if field_name == "analytics":
            analytics = dict(merged.get("analytics") or empty_analytics())
            for key in ANALYTICS_FIELDS:
                if isinstance(value, Mapping) and key in value:
                    analytics[key] = value[key]
            merged["analytics"] = analytics
        else:
            merged[field_name] = _validated(field_name, value)
    merged["updated_at"] = datetime.utcnow()
    return merged


def to_facts(product: Mapping[str, Any]) -> ProductFacts:
    return ProductFacts(
        id=product.get("id"),
        name=product.get("name") or "",
        description=product.get("description") or "",
        price=product.get("price"),
        category=product.get("category") or "General",
        ingredients=product.get("ingredients"),
        brand=product.get("brand") or "",
        images=tuple(product.get("images") or ()),
        tags=tuple(product.get("tags") or ()),
    )


def to_snapshot(product: Mapping[str, Any]) -> AnalyticsSnapshot:
    analytics = product.get("analytics") or {}
    return AnalyticsSnapshot.build(
        views=analytics.get("views", 0),
        sales=analytics.get("sales", 0),
        reviews=analytics.get("reviews") or [],
        rating=analytics.get("rating", 0),
    )


# ─── Interface ───────────────────────────────────────────────────────────────


class ProductRepository(ABC):
    @abstractmethod
    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def get(self, product_id: str) -> Dict[str, Any]: ...

    @abstractmethod
    def list(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def update(self, product_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    def delete(self, product_id: str) -> Dict[str, Any]: ...

    @abstractmethod
    def search(self, query: str) -> List[Dict[str, Any]]: ...


# ─── SQLAlchemy implementation ───────────────────────────────────────────────


class SqlProductRepository(ProductRepository):
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _load(self, db: Session, product_id: str) -> Product:
        product = db.get(Product, product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        if not data.get("name") or data.get("price") in (None, ""):
            raise ValidationError("Name and price are required")
        now = datetime.utcnow()
        fields = {f: _validated(f, data.get(f)) for f in ("name", "price", "images", "tags", "specifications")}
        analytics = empty_analytics()
        analytics.update({k: v for k, v in (data.get("analytics") or {}).items() if k in ANALYTICS_FIELDS})

        product = Product(
            id=str(uuid.uuid4()),
            description=data.get("description") or "",
            category=data.get("category") or "General",
            brand=data.get("brand") or "",
            ingredients=data.get("ingredients"),
            analytics=analytics,
            created_at=now,
            updated_at=now,
            **fields,
        )
        with get_db(self.session_factory) as db:
            db.add(product)
            db.flush()
            result = product.to_dict()
        logger.info(f"Created product {result['id']} ({result['name']})")
        return result

    def get(self, product_id: str) -> Dict[str, Any]:
        with get_db(self.session_factory) as db:
            return self._load(db, product_id).to_dict()

    def list(self) -> List[Dict[str, Any]]:
        with get_db(self.session_factory) as db:
            rows = db.query(Product).order_by(Product.created_at).all()
            return [p.to_dict() for p in rows]

    def update(self, product_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]:
        with get_db(self.session_factory) as db:
            product = self._load(db, product_id)
            current = {f: getattr(product, f) for f in UPDATABLE_FIELDS}
            merged = apply_patch(current, patch)
            for field_name in UPDATABLE_FIELDS:
                setattr(product, field_name, merged[field_name])
            product.updated_at = merged["updated_at"]
            db.flush()
            return product.to_dict()

    def delete(self, product_id: str) -> Dict[str, Any]:
        with get_db(self.session_factory) as db:
            product = self._load(db, product_id)
            result = product.to_dict()
            db.delete(product)
        logger.info(f"Deleted product {product_id}")
        return result

    def search(self, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring match over name, description, category, brand, tags."""
        needle = (query or "").strip().lower()
        escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with get_db(self.session_factory) as db:
            pattern = f"%{escaped}%"
            column_hits = db.query(Product).filter(or_(
                func.lower(Product.name).like(pattern, escape="\\"),
                func.lower(Product.description).like(pattern, escape="\\"),
                func.lower(Product.category).like(pattern, escape="\\"),
                func.lower(Product.brand).like(pattern, escape="\\"),
            )).all()
            hit_ids = {p.id for p in column_hits}
            # tags live in a JSON column; match them in Python
            rows = db.query(Product).order_by(Product.created_at).all()
            return [
                p.to_dict() for p in rows
                if p.id in hit_ids or any(needle in str(t).lower() for t in (p.tags or []))
            ]
