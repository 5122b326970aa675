from reaper_setlist.app import create_app

__all__ = ['create_app']
