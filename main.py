"""WSGI entrypoint for the recipe cache service.

The Flask development server is not started from this module so that
deployments run it under a WSGI server. Local development can still use
``flask --app main run`` which imports the ``app`` object defined below.
"""

import logging
import os

from recipe_cache import create_app

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

app = create_app()


__all__ = ["app"]
