"""Backend-as-a-service collaborators (object storage, upload handling)"""
