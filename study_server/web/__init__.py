"""
Tutorial web server showing routing and the Model-View-Controller split.

- `routing`: exact-match (method, path) dispatch table with a 404 fallback
- `models`: immutable fixture records behind a read-only store
- `views`: pure HTML layout helpers
- `controllers`: route handlers tying models and views together
- `app`: FastAPI/uvicorn wiring
"""
