import sys
import os
import uvicorn

# Add current directory to sys.path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from floodline.core.config import settings

if __name__ == "__main__":
    try:
        print(f"Starting uvicorn server on port {settings.PORT}...")
        uvicorn.run("floodline.main:app", host="0.0.0.0", port=settings.PORT, reload=False)
    except Exception as e:
        print(f"Failed to start server: {e}")
        sys.exit(1)
