"""WebSocket relay server and in-process relay."""
