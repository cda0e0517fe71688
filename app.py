"""Entry point when the dashboard is started with ``python app.py``.

Starts the Flask web interface by default so hosting platforms that run
``python app.py`` serve the dashboard. The command line interface stays
available through ``python -m clubdesk``.
"""

from clubdesk.web import main as run_web


if __name__ == "__main__":
    run_web()
