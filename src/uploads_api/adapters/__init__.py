"""
Adapter layer for the Uploads API.

Contains the blob store abstraction with local filesystem and S3 implementations.
"""
