"""Framework adapters: HTTP boundary (FastAPI) and JSON file persistence."""
