"""HTTP API (FastAPI) over the auction coordinator."""
