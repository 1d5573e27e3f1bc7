"""
Post orchestration: validate composer content, upload media, dispatch to
platforms, track progress and reconcile drafts and storage.
"""
