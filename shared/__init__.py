"""Fixture bookkeeping shared by ``scripts/gen_fixtures.py`` and the test suite.

Kept free of numpy and pydantic so the generator and the sanity tests can
agree on the committed ASCII grid list without importing the domain.
"""
