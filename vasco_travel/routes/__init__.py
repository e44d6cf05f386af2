# vasco_travel/routes/__init__.py
from .travel import create_travel_blueprint

__all__ = ['create_travel_blueprint']
