"""Shared value objects used across domains."""

from cardsync.domain.shared.value_objects.secure_string import SecureString

__all__ = ["SecureString"]
