# conftest.py

"""Puts the checkout root on sys.path so `core`, `utils` and `main` import without installing."""
