import json
from functools import lru_cache

import firebase_admin
from firebase_admin import credentials, firestore

from app.config import get_settings
from app.utils.logger import logger


@lru_cache()
def get_db():
    settings = get_settings()

    # Load credentials
    if not firebase_admin._apps:
        if settings.FIREBASE_CREDENTIALS:
            # Running on the host (env variable)
            cred = credentials.Certificate(json.loads(settings.FIREBASE_CREDENTIALS))
        else:
            # Running locally (file)
            cred = credentials.Certificate(str(settings.FIREBASE_KEY_PATH))

        firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin initialized")

    return firestore.client()
