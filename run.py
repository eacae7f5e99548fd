import uvicorn

from solestore.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "solestore.app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
    )
