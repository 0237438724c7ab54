"""
Development entry point.

Usage:
    python run.py

Starts the Flask development server on PORT (default 4000) with the
config selected by APP_ENV.
"""

import sys

from favlinks import create_app

app = create_app()

if __name__ == '__main__':
    port = app.config['PORT']
    print(f'\n  Favorite Links running on http://localhost:{port} ({app.config["ENV_NAME"]})\n')

    try:
        app.run(host='127.0.0.1', port=port, debug=app.debug)
    except OSError as exc:
        # Port in use or not permitted: nothing else to do but report and exit.
        app.logger.critical(
            'Could not start server on port %s: %s', port, exc,
            extra={'event': 'startup_failed'},
        )
        sys.exit(1)
