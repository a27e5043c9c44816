# run.py
"""
Dev server with hot-reload.
Uses watchfiles.run_process to manage restarts of a fresh uvicorn subprocess.
"""
import sys


PORT = 8000


def _server():
    """Worker function — runs in each spawned subprocess."""
    import uvicorn

    uvicorn.run(
        "aurora_gold.main:app",
        host="127.0.0.1",
        port=PORT,
        reload=False,       # watchfiles handles restarts, not uvicorn
        log_level="info",
    )


if __name__ == "__main__":
    # Hot-reload: watchfiles watches aurora_gold/ and respawns _server() on .py changes
    if "--no-reload" in sys.argv:
        _server()
    else:
        from watchfiles import run_process
        print("🔄  Hot-reload active — watching aurora_gold/")
        print(f"📡  Server → http://127.0.0.1:{PORT}")
        run_process(
            "aurora_gold",
            target=_server,
            watch_filter=lambda _, p: p.endswith(".py"),
        )
