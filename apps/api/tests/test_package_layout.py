from __future__ import annotations

import importlib

import pytest


FAMILY_PACKAGES = (
    "accounts",
    "activity",
    "cases",
    "catalog",
    "clients",
    "complaints",
    "consultations",
    "invoices",
    "platform",
    "registrations",
    "subscriptions",
)


@pytest.mark.parametrize("name", FAMILY_PACKAGES)
def test_family_packages_are_regular_packages(name: str) -> None:
    package = importlib.import_module(f"legaldesk.{name}")

    assert package.__file__ is not None
    assert package.__file__.endswith("__init__.py")
