"""Identifier and URL generators for simulated processor responses."""

from __future__ import annotations

from uuid import uuid4


def random_string() -> str:
    """Opaque identifier used for authorization ids, NSU, TID and correlation ids."""
    return uuid4().hex


def random_url(base: str = "https://web3pago.example.com/checkout") -> str:
    """Single-use URL for redirect and bank invoice flows."""
    return f"{base}?token={random_string()}"
