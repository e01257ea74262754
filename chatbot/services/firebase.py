import logging

import firebase_admin
from firebase_admin import credentials

from chatbot.core import config

logger = logging.getLogger(__name__)


def init_firebase() -> firebase_admin.App:
    """Initialise the default Firebase app once; later calls return the same app."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if config.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = config.FIREBASE_STORAGE_BUCKET

    if config.FIREBASE_PRIVATE_KEY and config.FIREBASE_CLIENT_EMAIL:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": config.FIREBASE_PROJECT_ID,
            "client_email": config.FIREBASE_CLIENT_EMAIL,
            "private_key": config.FIREBASE_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
    else:
        # falls back to GOOGLE_APPLICATION_CREDENTIALS / metadata server
        cred = credentials.ApplicationDefault()
        if config.FIREBASE_PROJECT_ID:
            options["projectId"] = config.FIREBASE_PROJECT_ID

    app = firebase_admin.initialize_app(cred, options or None)
    logger.info("firebase initialised (project=%s)", config.FIREBASE_PROJECT_ID or "default")
    return app
