# Lets uvicorn find the app when running from the repository root:
#   uvicorn main:app --host 0.0.0.0 --port 8001

from tasklog.main import app  # noqa: F401
