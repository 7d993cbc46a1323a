"""
Application Layer

Orchestrates domain objects and infrastructure ports to fulfill use cases.

Structure:
- services/: Queue engine, playback controller, provider fan-out,
  event/playlist use cases and the multi-replica sweep
- interfaces/: Port interfaces for infrastructure adapters
"""
