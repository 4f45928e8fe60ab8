"""Firebase Realtime Database access."""

from cuelock.core.api.firebase.store import FirebaseSessionStore, firebase_path

__all__ = ["FirebaseSessionStore", "firebase_path"]
