"""Organization hierarchy reorganization toolkit for Firestore data."""
