"""Development entry point: serve the API with uvicorn."""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "devevent.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
        reload=os.environ.get("RELOAD", "").lower() in ("1", "true", "yes"),
    )
