"""Account lifecycle tools for the LifeGuardian Firebase project.

Password resets, one-time-passcode emails and the administrative cleanup
scripts (single-user cleanup, full wipe, orphan reconciliation) that run
against Firebase Auth, Firestore and Cloud Storage.
"""
