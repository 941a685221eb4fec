#!/usr/bin/env python3
"""Main entry point for the AI Debate Arena."""

import logging
import os
import sys

from debate_arena.config.settings import get_default_config


def setup_logging(level: str = "INFO"):
    """Configure logging for the web server."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def print_usage():
    """Print usage information for local development."""
    print("AI Debate Arena")
    print("=" * 40)
    print("🌐 Web Server (REST API):")
    print("   python main.py --web")
    print()
    print("⚙️  Configuration:")
    print("   debate_config.json in the working directory (optional)")
    print("   OPENROUTER_API_KEY for the default API key")
    print()


def start_web_server():
    """Start the FastAPI web server."""
    config = get_default_config()
    setup_logging(config.system.log_level)

    import uvicorn

    from debate_arena.web.api import create_app

    port = int(os.environ.get("PORT", 8000))

    print("🎭 Starting AI Debate Arena...")
    print(f"📡 API Documentation: http://localhost:{port}/docs")

    uvicorn.run(create_app(config), host="0.0.0.0", port=port, log_level="info")


def main():
    """Main entry point."""
    is_production = "PORT" in os.environ or os.environ.get("ENVIRONMENT") == "production"

    if is_production or "--web" in sys.argv:
        start_web_server()
    else:
        print_usage()
        print("💡 Tip: Use 'python main.py --web' to start the server")


if __name__ == "__main__":
    main()
