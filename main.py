"""
Entry point for the licensekeeper server process.  Reads the licensekeeper.yaml
configuration and launches the FastAPI application with uvicorn.
"""

import uvicorn

from licensekeeper.config import config
from licensekeeper.main import app

app_config = config.get_config()

if __name__ == "__main__":
    uvicorn.run(app, host=app_config["api"]["host"], port=app_config["api"]["port"])
