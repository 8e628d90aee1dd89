#!/usr/bin/env python3

import uvicorn

from mantle_context.config import get_settings
from mantle_context.main import app


def main() -> None:
    settings = get_settings()
    print("Starting Mantle on-chain context server...")
    print(f"Server will be available at: http://{settings.HOST}:{settings.PORT}")
    print(f"Tool list at: http://{settings.HOST}:{settings.PORT}/api/tools")
    print("Press Ctrl+C to stop the server")

    try:
        uvicorn.run(
            app,
            host=settings.HOST,
            port=settings.PORT,
            reload=False,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")


if __name__ == "__main__":
    main()
