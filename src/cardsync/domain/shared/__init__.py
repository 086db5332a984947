"""Shared kernel: exceptions, time helpers and cross-domain value objects."""
