"""Interactive explorer: navigation state, views, rendering and event loop."""
