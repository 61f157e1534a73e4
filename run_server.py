import uvicorn

from config import HOST, PORT

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=True,
        # Keep the SQLite file out of the reload watcher
        reload_excludes=["*.db", "*.db-journal"]
    )
