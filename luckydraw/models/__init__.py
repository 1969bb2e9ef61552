"""ORM models."""

from luckydraw.models.state_record import StateRecord

__all__ = ["StateRecord"]
