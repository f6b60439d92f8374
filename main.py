"""
Main entry point for the media gate.
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run("media_gate.app.api:app", host="0.0.0.0", port=8000, reload=True)
