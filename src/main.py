"""

    Web server for the Tak puzzle service

    Copyright (C) 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl


    This Python >= 3.11 web server module uses the Flask framework
    to serve Tak puzzles to players and record their attempts.

    Puzzle selection is found in selector.py, and puzzle difficulty
    ratings in puzzlerating.py.

    JSON-based client API entrypoints are defined in puzzles.py.

"""

from __future__ import annotations

from typing import Any, cast

import logging
from logging.config import dictConfig

from flask import Flask, request
from flask_cors import CORS

from config import running_local, host, port, ResponseType
from db import init_session_manager, db_wsgi_middleware, request_context
from puzzles import puzzles_blueprint


# Configure logging
dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
            }
        },
        "handlers": {
            "wsgi": {
                "class": "logging.StreamHandler",
                "stream": "ext://flask.logging.wsgi_errors_stream",
                "formatter": "default",
            }
        },
        "root": {"level": "DEBUG" if running_local else "INFO", "handlers": ["wsgi"]},
    }
)

if running_local:
    logging.info("Puzzle server running with DEBUG set to True")

# Initialize the database connection pool and make sure
# that the tables exist
init_session_manager()
with request_context() as db:
    db.create_tables()

# Initialize Flask
app = Flask(__name__)
# The following cast to Any can be removed once Flask typing becomes
# more robust and/or compatible with Pylance
cast_app = cast(Any, app)

# Wrap the WSGI app so that each request gets its own database session,
# committed at the end of the request and always closed
setattr(app, "wsgi_app", db_wsgi_middleware(cast_app.wsgi_app))

# Initialize Cross-Origin Resource Sharing (CORS) Flask plug-in;
# the puzzle client may be served from anywhere
CORS(
    app,
    origins="*",
    methods=["GET", "POST"],
    allow_headers="*",
    send_wildcard=True,
)

cast_app.config.update(DEBUG=running_local)

# Register the Flask blueprint for the puzzle routes
app.register_blueprint(puzzles_blueprint)


@app.before_request
def log_request() -> None:
    """Trace incoming requests"""
    logging.info(f"{request.method} {request.full_path.rstrip('?')}")


@app.errorhandler(500)  # type: ignore
def server_error(e: Any) -> ResponseType:
    """Return a custom 500 error"""
    logging.error(f"Server error: {e}")
    return f"<html><body><p>An error occurred in the server: {e}</p></body></html>", 500


# Run a default Flask web server for testing if invoked directly as a main program
if __name__ == "__main__":
    app.run(
        debug=running_local,
        port=int(port),
        use_debugger=running_local,
        threaded=False,
        processes=1,
        host=host,  # Set by default to "0.0.0.0" in config.py
    )
