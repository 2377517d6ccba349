"""
Service layer for video downloads.

This module contains the transcoding orchestrator and its helpers,
independent of the HTTP request handling. These functions are used by:
- The download API view (downloads/views.py)
- The CLI management command (management/commands/transcode.py)
"""
