"""
Application layer.

The application layer orchestrates domain objects and defines the boundaries
of the system. It contains the use cases available to the HTTP layer and the
client-side run controller.

This layer contains:
- Use Cases: create/resume, read, save, complete and abandon runs
- DTOs: Data transfer objects for use case results
- Protocols: Interfaces for repositories and collaborators
- Services: run navigation and debounced autosave
"""
