from .app import create_app
from .store import RecordStore

__all__ = ['create_app', 'RecordStore']
