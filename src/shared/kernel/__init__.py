from src.shared.kernel.models.base import Base, TimestampMixin, utcnow

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
]
