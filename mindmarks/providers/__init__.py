"""Concrete adapters for the interfaces in :mod:`mindmarks.interfaces`."""
