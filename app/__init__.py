# app/__init__.py
"""
SnapShare API: red social de fotos (posts, historias, follows, DMs y
panel admin) sobre FastAPI + SQLAlchemy async.
"""
