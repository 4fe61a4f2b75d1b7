"""
Realtime app for WebSocket communication.

This app provides:
- A WebSocket consumer customers use to watch one request's status
- Notification helpers the matching engine uses to push status events

Key Components:
    - consumers/: WebSocket consumers (request status)
    - notifications.py: Request event notification helpers

Usage:
    from realtime.consumers import RequestConsumer
    from realtime.notifications import notify_request_event
"""
