import uvicorn
import os

if __name__ == "__main__":
    snapshot = os.environ.setdefault(
        "TARGETVIEW_SNAPSHOT", os.path.join(os.getcwd(), "data", "snapshot.json")
    )

    print("Starting Target View API Server...")
    print(f"Snapshot: {snapshot}")
    print("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "targetview.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
