"""
WSGI entry point.
"""

import os

from .app import create_app

# WSGI servers expect the application to be named 'app'
app = create_app()

if __name__ == "__main__":
    # Development server
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=app.config['DEBUG']
    )
